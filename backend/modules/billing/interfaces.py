"""
Billing module interface.

Other modules should depend on these protocols, not the concrete
implementations.
"""

from decimal import Decimal
from typing import Any, Optional, Protocol, runtime_checkable

from .models import (
    CreateOrderResponse,
    PaymentRecord,
    PaymentStatusResponse,
    ProviderOrder,
    ProviderPayment,
    SettlementResult,
)


@runtime_checkable
class IPaymentGateway(Protocol):
    """
    The payment provider contract: create an order, fetch an order,
    fetch a payment. Amounts are in minor units.
    """

    @property
    def key_id(self) -> str:
        """Public key id handed to the checkout widget."""
        ...

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, Any],
    ) -> ProviderOrder:
        ...

    async def fetch_order(self, order_id: str) -> ProviderOrder:
        ...

    async def fetch_payment(self, payment_id: str) -> ProviderPayment:
        ...

    async def aclose(self) -> None:
        ...


@runtime_checkable
class IPaymentRepository(Protocol):
    """Append-only payment storage with a unique payment_id."""

    async def get_by_payment_id(self, payment_id: str) -> Optional[PaymentRecord]:
        ...

    async def add(self, record: PaymentRecord) -> PaymentRecord:
        """
        Persist a record.

        Raises:
            DuplicatePaymentError: If payment_id is already stored
        """
        ...

    async def delete(self, record_id: str) -> None:
        """Remove a record (only used to undo a failed settlement)."""
        ...

    async def list_for_user(self, user_id: str, limit: int = 10) -> list[PaymentRecord]:
        """List a user's payments, most recent first."""
        ...


@runtime_checkable
class IBillingService(Protocol):
    """
    Interface for billing operations.

    This protocol defines the contract that the billing module exposes
    to other modules.
    """

    async def create_order(
        self,
        user_id: str,
        amount: Decimal,
        plan: str = "monthly",
        currency: str = "INR",
    ) -> CreateOrderResponse:
        """
        Create a provider order for a plan purchase.

        Raises:
            InvalidPlanError: If the plan or currency is unknown
            InvalidAmountError: If the amount is out of range or off-price
            PaymentGatewayError: If the provider call fails
        """
        ...

    async def verify_and_settle(
        self,
        user_id: str,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> SettlementResult:
        """
        Verify a completed checkout and activate the subscription.

        Idempotent per payment_id: the second call for the same payment
        returns an already_processed failure and changes nothing.

        Returns:
            SettlementOk, or SettlementFailure with the refusal kind

        Raises:
            PaymentGatewayError: If the provider call fails
        """
        ...

    async def get_payment_status(self, user_id: str, order_id: str) -> PaymentStatusResponse:
        """Read-only view of an order and the user's subscription."""
        ...

    async def list_payments(self, user_id: str, limit: int = 10) -> list[PaymentRecord]:
        """List a user's payments, most recent first."""
        ...
