"""
Billing module data models.

These models define the data structures used by the billing module
and exposed to other modules through the interface.

Amounts are Decimal in major currency units (rupees) everywhere except
on the wire to the payment provider, which takes minor units (paise).
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field

from shared.models import CamelModel

CURRENCY = "INR"
MIN_ORDER_AMOUNT = Decimal("1")
MAX_ORDER_AMOUNT = Decimal("10000")
MINOR_UNITS_PER_MAJOR = 100

# Provider payment statuses that count as paid
COMPLETED_PAYMENT_STATUSES = frozenset({"captured", "authorized"})


class Plan(BaseModel):
    """A purchasable subscription plan."""

    name: str
    price: Decimal = Field(..., description="Price in major units")
    currency: str = CURRENCY
    duration_days: int = Field(..., gt=0)

    model_config = {"frozen": True}


PLANS: dict[str, Plan] = {
    "monthly": Plan(name="monthly", price=Decimal("130"), duration_days=30),
}


def to_minor_units(amount: Decimal) -> int:
    """Rupees to paise."""
    return int((amount * MINOR_UNITS_PER_MAJOR).to_integral_value())


def to_major_units(amount: int) -> Decimal:
    """Paise to rupees."""
    return Decimal(amount) / MINOR_UNITS_PER_MAJOR


class PaymentStatus(str, Enum):
    """Stored payment states. Only completed payments are ever stored."""

    COMPLETED = "completed"


class PaymentRecord(BaseModel):
    """
    A settled payment.

    Append-only; ``payment_id`` is unique at the storage layer and is
    what makes settlement idempotent.
    """

    id: str = Field(..., description="Record ID (UUID)")
    user_id: str = Field(..., description="User who paid")
    order_id: str = Field(..., description="Provider order ID")
    payment_id: str = Field(..., description="Provider payment ID (unique)")
    amount: Decimal = Field(..., description="Amount in major units")
    currency: str = CURRENCY
    plan: str = "monthly"
    status: PaymentStatus = PaymentStatus.COMPLETED
    subscription_expires_at: Optional[datetime] = Field(
        None,
        description="Subscription expiry granted by this payment",
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ProviderOrder(BaseModel):
    """An order as reported by the payment provider."""

    id: str
    amount: int = Field(..., description="Amount in minor units")
    currency: str
    receipt: Optional[str] = None
    status: str = "created"
    notes: dict[str, Any] = Field(default_factory=dict)


class ProviderPayment(BaseModel):
    """A payment as reported by the payment provider."""

    id: str
    order_id: Optional[str] = None
    amount: int = Field(default=0, description="Amount in minor units")
    currency: str = CURRENCY
    status: str


class SettlementFailureKind(str, Enum):
    """Terminal reasons a settlement is refused."""

    ALREADY_PROCESSED = "already_processed"
    INVALID_SIGNATURE = "invalid_signature"
    ORDER_OWNERSHIP_MISMATCH = "order_ownership_mismatch"
    PAYMENT_NOT_COMPLETED = "payment_not_completed"


class SettlementOk(BaseModel):
    """Payment verified, recorded and applied to the user."""

    ok: Literal[True] = True
    payment: PaymentRecord
    subscription_expires_at: datetime


class SettlementFailure(BaseModel):
    """Payment refused. Ledger state is unchanged."""

    ok: Literal[False] = False
    kind: SettlementFailureKind
    message: str


SettlementResult = Union[SettlementOk, SettlementFailure]


# API payloads


class CreateOrderRequest(CamelModel):
    """Request body for POST /payment/create-order."""

    amount: Decimal = Field(..., description="Amount in major units")
    plan: str = "monthly"
    currency: str = CURRENCY


class CreateOrderResponse(CamelModel):
    """Response from order creation."""

    success: bool = True
    order_id: str
    amount: int = Field(..., description="Amount in minor units")
    currency: str
    key_id: str = Field(..., description="Public key for the checkout widget")


class VerifyPaymentRequest(CamelModel):
    """
    Request body for POST /payment/verify-payment.

    Accepts both camelCase names and the checkout widget's own field names.
    """

    order_id: str = Field(
        ...,
        min_length=1,
        pattern=r"^order_[a-zA-Z0-9]+$",
        validation_alias=AliasChoices("orderId", "order_id", "razorpay_order_id"),
    )
    payment_id: str = Field(
        ...,
        min_length=1,
        pattern=r"^pay_[a-zA-Z0-9]+$",
        validation_alias=AliasChoices("paymentId", "payment_id", "razorpay_payment_id"),
    )
    signature: str = Field(
        ...,
        min_length=1,
        pattern=r"^[a-fA-F0-9]{64}$",
        validation_alias=AliasChoices("signature", "razorpay_signature"),
    )


class VerifyPaymentResponse(CamelModel):
    """Response from a successful settlement."""

    success: bool = True
    message: str = "Payment verified and subscription activated"
    payment_id: str
    order_id: str
    subscription_expires_at: datetime
    amount: Decimal
    currency: str


class OrderStatus(CamelModel):
    """Provider order state, amount in major units."""

    id: str
    amount: Decimal
    currency: str
    status: str


class SubscriptionStatus(CamelModel):
    is_subscribed: bool = False
    subscription_expires_at: Optional[datetime] = None


class PaymentStatusResponse(CamelModel):
    """Response from GET /payment/payment-status."""

    success: bool = True
    order: OrderStatus
    user: SubscriptionStatus
