"""
Entitlement module exceptions.
"""

from typing import Any

from shared.exceptions import AuthorizationError

from .models import EntitlementReason


class EntitlementExceededError(AuthorizationError):
    """
    Raised when an authenticated user has no entitlement left.

    A business-rule denial, not a server fault. The response tells the
    client to offer a subscription.
    """

    def __init__(self, reason: EntitlementReason, message: str):
        super().__init__(message, code="ENTITLEMENT_EXCEEDED")
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["reason"] = self.reason.value
        body["requiresSubscription"] = True
        return body
