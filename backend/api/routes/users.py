"""
User endpoints.

Provides endpoints for the current user's profile.
"""

from fastapi import APIRouter, Depends

from shared.models import AuthenticatedUser
from modules.auth.exceptions import AccountInactiveError, UserNotFoundError
from modules.auth.models import UserEntitlementView
from modules.entitlements.ledger import EntitlementLedger

from ..dependencies import get_ledger
from ..middleware.auth import get_current_user
from ..middleware.rate_limit import rate_limit

router = APIRouter()


@router.get(
    "/me",
    response_model=UserEntitlementView,
    dependencies=[Depends(rate_limit("read"))],
)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    ledger: EntitlementLedger = Depends(get_ledger),
) -> UserEntitlementView:
    """
    Get the current user's identity and entitlement fields.

    Requires authentication.
    """
    try:
        entitlement = await ledger.resolve(user.id)
    except UserNotFoundError:
        raise AccountInactiveError()
    return UserEntitlementView.from_user(entitlement.user)
