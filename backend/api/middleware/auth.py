"""
Session token authentication dependencies.

The token may arrive as an ``Authorization: Bearer`` header, a ``token``
field in a JSON body, or a ``token`` query parameter, checked in that
order. The browser extension uses the body form.
"""

from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from shared.models import AuthenticatedUser
from modules.entitlements.gate import GateContext

from ..dependencies import ServiceContainer, get_container

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)

BODY_METHODS = {"POST", "PUT", "PATCH"}


async def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Any]:
    """
    Find the raw token on a request.

    Returns whatever was supplied, unvalidated; the auth service rejects
    anything that is not token-shaped.
    """
    if credentials is not None:
        return credentials.credentials

    if request.method in BODY_METHODS:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("token") is not None:
            return body["token"]

    return request.query_params.get("token")


async def get_current_user(
    token: Optional[Any] = Depends(extract_token),
    container: ServiceContainer = Depends(get_container),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that need a logged-in, active user but do
    not consume entitlement.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    return await container.auth.authenticate(token)


async def require_entitlement(
    token: Optional[Any] = Depends(extract_token),
    container: ServiceContainer = Depends(get_container),
) -> GateContext:
    """
    Dependency for billable endpoints.

    Runs the full request gate and rejects users without entitlement.
    """
    return await container.gate.admit(token)


# Type aliases for cleaner route definitions
RequireAuth = Depends(get_current_user)
RequireEntitlement = Depends(require_entitlement)
