"""
Usage endpoints.

Provides the dashboard usage summary.
"""

from fastapi import APIRouter, Depends

from shared.models import AuthenticatedUser
from modules.entitlements.models import UsageSummary
from modules.entitlements.summary import UsageSummaryService

from ..dependencies import get_summary_service
from ..middleware.auth import get_current_user
from ..middleware.rate_limit import rate_limit

router = APIRouter()


@router.get(
    "/usage",
    response_model=UsageSummary,
    dependencies=[Depends(rate_limit("read"))],
)
async def get_usage_summary(
    user: AuthenticatedUser = Depends(get_current_user),
    service: UsageSummaryService = Depends(get_summary_service),
) -> UsageSummary:
    """
    Get the user's entitlement, per-action usage and recent payments.

    Served from the entitlement cache when fresh; every ledger change
    invalidates it.

    Requires authentication.
    """
    return await service.get_summary(user.id)
