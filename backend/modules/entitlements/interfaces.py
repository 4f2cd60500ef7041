"""
Entitlement module interfaces.

The usage summary lists recent payments without importing the billing
module (billing depends on the ledger, not the other way round).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class PaymentLike(Protocol):
    """Fields the summary reads from a stored payment."""

    order_id: str
    payment_id: str
    amount: Decimal
    currency: str
    plan: str
    status: Enum
    subscription_expires_at: Optional[datetime]
    created_at: datetime


@runtime_checkable
class IPaymentHistory(Protocol):
    """Read access to a user's payments."""

    async def list_payments(self, user_id: str, limit: int = 10) -> list[PaymentLike]:
        """List a user's payments, most recent first."""
        ...
