"""
Account endpoints.

Registration, login, and the composite token check used by the web
client and the browser extension.
"""

import logging

from fastapi import APIRouter, Depends

from shared.exceptions import AuthenticationError
from modules.auth.interfaces import IAuthService
from modules.auth.models import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenValidationRequest,
    TokenValidationResponse,
    UserEntitlementView,
    UserPublic,
)
from modules.entitlements.ledger import EntitlementLedger
from modules.entitlements.models import Allowed, EntitlementReason

from ..dependencies import get_auth_service, get_ledger
from ..middleware.rate_limit import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("auth"))],
)
async def register(
    request: RegisterRequest,
    auth: IAuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Create an account and return its first session token."""
    user, token = await auth.register(request.email, request.name, request.password)
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserPublic(id=user.id, email=user.email, name=user.name),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(rate_limit("auth"))],
)
async def login(
    request: LoginRequest,
    auth: IAuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Check credentials and return a fresh session token."""
    user, token = await auth.login(request.email, request.password)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserPublic(id=user.id, email=user.email, name=user.name),
    )


@router.post(
    "/validate-token",
    response_model=TokenValidationResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("api"))],
)
async def validate_token(
    request: TokenValidationRequest,
    auth: IAuthService = Depends(get_auth_service),
    ledger: EntitlementLedger = Depends(get_ledger),
) -> TokenValidationResponse:
    """
    Validate a token and report the user's entitlement.

    An unusable token is reported in the body with ``valid: false``
    rather than as an HTTP error. A lapsed subscription is corrected
    before answering.
    """
    try:
        user = await auth.authenticate(request.token)
    except AuthenticationError as e:
        return TokenValidationResponse(valid=False, error=e.message)

    entitlement = await ledger.resolve(user.id)
    decision = entitlement.decision

    if isinstance(decision, Allowed):
        if decision.reason is EntitlementReason.SUBSCRIBED:
            message = "Active subscription"
        else:
            message = f"{decision.remaining_trials} free trials remaining"
        remaining = decision.remaining_trials or 0
    else:
        message = decision.message
        remaining = 0

    return TokenValidationResponse(
        valid=True,
        user=UserEntitlementView.from_user(entitlement.user),
        can_use_service=decision.allowed,
        message=message,
        remaining_trials=remaining,
    )
