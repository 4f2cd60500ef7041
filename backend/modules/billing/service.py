"""
Billing service implementation.

Creates provider orders for plan purchases and settles completed
checkouts into subscriptions.

Settlement is idempotent per provider payment id. The payment record
is claimed (inserted) before the subscription is written, so the unique
constraint on payment_id decides which of two concurrent settlements
wins. If the subscription write then fails, the claim is removed.
"""

import hashlib
import hmac
import logging
import uuid
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from modules.auth.interfaces import IUserRepository
from modules.auth.exceptions import UserNotFoundError
from modules.auth.tokens import Clock, utc_now
from modules.entitlements.ledger import EntitlementLedger, derive_current_state

from .interfaces import IBillingService, IPaymentGateway, IPaymentRepository
from .models import (
    COMPLETED_PAYMENT_STATUSES,
    CURRENCY,
    MAX_ORDER_AMOUNT,
    MIN_ORDER_AMOUNT,
    PLANS,
    CreateOrderResponse,
    OrderStatus,
    PaymentRecord,
    PaymentStatusResponse,
    SettlementFailure,
    SettlementFailureKind,
    SettlementOk,
    SettlementResult,
    SubscriptionStatus,
    to_major_units,
    to_minor_units,
)
from .exceptions import (
    DuplicatePaymentError,
    InvalidAmountError,
    InvalidPlanError,
    OrderOwnershipMismatchError,
)

logger = logging.getLogger(__name__)

MAX_RECEIPT_LENGTH = 40


def compute_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    """HMAC-SHA256 of ``order_id|payment_id``, hex encoded."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(key_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def build_receipt(user_id: str, epoch_ms: int) -> str:
    """Receipt id: ``rec_<last 8 of user id>_<last 10 digits of ms>``."""
    return f"rec_{user_id[-8:]}_{str(epoch_ms)[-10:]}"[:MAX_RECEIPT_LENGTH]


class BillingService(IBillingService):
    """
    Billing over a payment gateway, a payment repository and the ledger.

    Args:
        gateway: Payment provider client
        payments: Payment record storage
        ledger: Entitlement ledger, used to activate subscriptions
        users: Credential store, for read-only subscription status
        key_secret: Gateway secret used to check checkout signatures
        clock: Source of "now"; injectable for tests
    """

    def __init__(
        self,
        gateway: IPaymentGateway,
        payments: IPaymentRepository,
        ledger: EntitlementLedger,
        users: IUserRepository,
        key_secret: str,
        clock: Optional[Clock] = None,
    ):
        self._gateway = gateway
        self._payments = payments
        self._ledger = ledger
        self._users = users
        self._key_secret = key_secret
        self._clock = clock or utc_now

    async def create_order(
        self,
        user_id: str,
        amount: Decimal,
        plan: str = "monthly",
        currency: str = CURRENCY,
    ) -> CreateOrderResponse:
        selected = PLANS.get(plan)
        if selected is None:
            raise InvalidPlanError(f"Unknown plan: {plan}")

        currency = currency.upper()
        if currency != selected.currency:
            raise InvalidPlanError(f"Unsupported currency: {currency}")

        if amount < MIN_ORDER_AMOUNT or amount > MAX_ORDER_AMOUNT:
            raise InvalidAmountError(
                amount,
                f"Amount must be between {MIN_ORDER_AMOUNT} and {MAX_ORDER_AMOUNT}",
            )
        if amount != selected.price:
            raise InvalidAmountError(
                amount,
                f"Expected {selected.price} for the {plan} plan",
            )

        now = self._clock()
        order = await self._gateway.create_order(
            amount=to_minor_units(amount),
            currency=currency,
            receipt=build_receipt(user_id, int(now.timestamp() * 1000)),
            notes={
                "userId": user_id,
                "plan": plan,
                "timestamp": now.isoformat(),
            },
        )
        logger.info(f"Created order {order.id} for user {user_id} ({plan})")

        return CreateOrderResponse(
            order_id=order.id,
            amount=order.amount,
            currency=order.currency,
            key_id=self._gateway.key_id,
        )

    async def verify_and_settle(
        self,
        user_id: str,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> SettlementResult:
        if await self._payments.get_by_payment_id(payment_id) is not None:
            return self._refuse(
                SettlementFailureKind.ALREADY_PROCESSED,
                "Payment has already been processed",
                user_id, order_id, payment_id,
            )

        expected = compute_signature(order_id, payment_id, self._key_secret)
        if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            return self._refuse(
                SettlementFailureKind.INVALID_SIGNATURE,
                "Invalid payment signature",
                user_id, order_id, payment_id,
            )

        order = await self._gateway.fetch_order(order_id)
        if order.notes.get("userId") != user_id:
            return self._refuse(
                SettlementFailureKind.ORDER_OWNERSHIP_MISMATCH,
                "Order does not belong to this user",
                user_id, order_id, payment_id,
            )

        payment = await self._gateway.fetch_payment(payment_id)
        if payment.status not in COMPLETED_PAYMENT_STATUSES:
            return self._refuse(
                SettlementFailureKind.PAYMENT_NOT_COMPLETED,
                f"Payment not completed. Status: {payment.status}",
                user_id, order_id, payment_id,
            )
        if payment.order_id != order_id:
            return self._refuse(
                SettlementFailureKind.PAYMENT_NOT_COMPLETED,
                "Payment does not match order",
                user_id, order_id, payment_id,
            )

        plan_name = order.notes.get("plan") or "monthly"
        plan = PLANS.get(plan_name, PLANS["monthly"])
        expires_at = self._clock() + timedelta(days=plan.duration_days)

        record = PaymentRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            order_id=order_id,
            payment_id=payment_id,
            amount=to_major_units(order.amount),
            currency=order.currency,
            plan=plan.name,
            subscription_expires_at=expires_at,
            created_at=self._clock(),
        )

        try:
            await self._payments.add(record)
        except DuplicatePaymentError:
            return self._refuse(
                SettlementFailureKind.ALREADY_PROCESSED,
                "Payment has already been processed",
                user_id, order_id, payment_id,
            )

        try:
            await self._ledger.activate_subscription(user_id, expires_at)
        except Exception:
            logger.error(
                f"Subscription activation failed for user {user_id}, "
                f"releasing payment {payment_id}"
            )
            await self._payments.delete(record.id)
            raise

        logger.info(
            f"Payment settled: order {order_id}, payment {payment_id}, "
            f"user {user_id}, amount {record.amount} {record.currency}"
        )
        return SettlementOk(payment=record, subscription_expires_at=expires_at)

    async def get_payment_status(self, user_id: str, order_id: str) -> PaymentStatusResponse:
        """
        Raises:
            OrderOwnershipMismatchError: If the order belongs to someone else
            UserNotFoundError: If the user doesn't exist
        """
        order = await self._gateway.fetch_order(order_id)
        if order.notes.get("userId") != user_id:
            raise OrderOwnershipMismatchError()

        user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        # Derived, not corrected: this endpoint never writes
        current = derive_current_state(user, self._clock()).user

        return PaymentStatusResponse(
            order=OrderStatus(
                id=order.id,
                amount=to_major_units(order.amount),
                currency=order.currency,
                status=order.status,
            ),
            user=SubscriptionStatus(
                is_subscribed=current.is_subscribed,
                subscription_expires_at=current.subscription_expires_at,
            ),
        )

    async def list_payments(self, user_id: str, limit: int = 10) -> list[PaymentRecord]:
        return await self._payments.list_for_user(user_id, limit=limit)

    def _refuse(
        self,
        kind: SettlementFailureKind,
        message: str,
        user_id: str,
        order_id: str,
        payment_id: str,
    ) -> SettlementFailure:
        logger.warning(
            f"Settlement refused ({kind.value}): order {order_id}, "
            f"payment {payment_id}, user {user_id}"
        )
        return SettlementFailure(kind=kind, message=message)
