"""
Test doubles for the external collaborators.

The payment gateway and the text transformer are the only pieces that
talk to the outside world; everything else runs for real on in-memory
storage.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from modules.billing.exceptions import PaymentGatewayError
from modules.billing.models import ProviderOrder, ProviderPayment
from modules.billing.service import compute_signature
from modules.transform.exceptions import TextTransformationError
from modules.transform.models import TransformOutput
from modules.usage.models import UsageAction

TEST_KEY_ID = "rzp_test_key"
TEST_KEY_SECRET = "test-razorpay-secret"

START = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakePaymentGateway:
    """In-memory stand-in for the Razorpay API."""

    def __init__(self, key_id: str = TEST_KEY_ID):
        self._key_id = key_id
        self.orders: dict[str, ProviderOrder] = {}
        self.payments: dict[str, ProviderPayment] = {}
        self.created: list[dict[str, Any]] = []
        self.closed = False
        self._next_order = 1

    @property
    def key_id(self) -> str:
        return self._key_id

    def add_order(
        self,
        order_id: str,
        user_id: Optional[str],
        amount: int = 13000,
        plan: str = "monthly",
        status: str = "paid",
    ) -> ProviderOrder:
        notes = {"userId": user_id, "plan": plan} if user_id else {}
        order = ProviderOrder(
            id=order_id, amount=amount, currency="INR", status=status, notes=notes
        )
        self.orders[order_id] = order
        return order

    def add_payment(
        self,
        payment_id: str,
        order_id: str,
        status: str = "captured",
        amount: int = 13000,
    ) -> ProviderPayment:
        payment = ProviderPayment(
            id=payment_id, order_id=order_id, amount=amount, status=status
        )
        self.payments[payment_id] = payment
        return payment

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, Any],
    ) -> ProviderOrder:
        order_id = f"order_Test{self._next_order:04d}"
        self._next_order += 1
        self.created.append(
            {"amount": amount, "currency": currency, "receipt": receipt, "notes": notes}
        )
        order = ProviderOrder(
            id=order_id, amount=amount, currency=currency, receipt=receipt, notes=notes
        )
        self.orders[order_id] = order
        return order

    async def fetch_order(self, order_id: str) -> ProviderOrder:
        if order_id not in self.orders:
            raise PaymentGatewayError("Payment provider rejected the request", status_code=400)
        return self.orders[order_id]

    async def fetch_payment(self, payment_id: str) -> ProviderPayment:
        if payment_id not in self.payments:
            raise PaymentGatewayError("Payment provider rejected the request", status_code=400)
        return self.payments[payment_id]

    async def aclose(self) -> None:
        self.closed = True


class FakeTextTransformer:
    """Echoes the input back, or fails on demand."""

    model = "fake-model"

    def __init__(self, fail: bool = False, tokens_used: int = 42):
        self.fail = fail
        self.tokens_used = tokens_used
        self.calls: list[tuple[UsageAction, str, Optional[str]]] = []

    async def transform(
        self,
        action: UsageAction,
        text: str,
        format: Optional[str] = None,
    ) -> TransformOutput:
        self.calls.append((action, text, format))
        if self.fail:
            raise TextTransformationError(action.value)
        return TransformOutput(
            text=f"{action.value}: {text}".upper(),
            model=self.model,
            tokens_used=self.tokens_used,
        )


def sign(order_id: str, payment_id: str, secret: str = TEST_KEY_SECRET) -> str:
    """Checkout signature as the payment widget would produce it."""
    return compute_signature(order_id, payment_id, secret)
