"""
Usage summary service.

Builds the dashboard view of a user's entitlement, usage stats and
recent payments, reading through the entitlement cache.
"""

import logging

from modules.usage.interfaces import IUsageRecorder

from .cache import EntitlementCache
from .interfaces import IPaymentHistory
from .ledger import EntitlementLedger
from .models import (
    Allowed,
    PaymentSummary,
    SummaryUser,
    UsageStatus,
    UsageSummary,
)

logger = logging.getLogger(__name__)

RECENT_PAYMENTS_LIMIT = 10


class UsageSummaryService:
    """Read-through cached usage summaries."""

    def __init__(
        self,
        ledger: EntitlementLedger,
        cache: EntitlementCache,
        recorder: IUsageRecorder,
        payments: IPaymentHistory,
    ):
        self._ledger = ledger
        self._cache = cache
        self._recorder = recorder
        self._payments = payments

    async def get_summary(self, user_id: str) -> UsageSummary:
        """
        Get a user's usage summary, from cache when fresh.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached

        generation = self._cache.generation(user_id)

        entitlement = await self._ledger.resolve(user_id)
        user = entitlement.user
        decision = entitlement.decision
        allowed = isinstance(decision, Allowed)

        stats = await self._recorder.get_stats(user_id)
        payments = await self._payments.list_payments(user_id, limit=RECENT_PAYMENTS_LIMIT)

        summary = UsageSummary(
            user=SummaryUser(
                id=user.id,
                email=user.email,
                name=user.name,
                free_trials_used=user.free_trials_used,
                is_subscribed=user.is_subscribed,
                subscription_expires_at=user.subscription_expires_at,
                free_trials_remaining=max(0, self._ledger.trial_limit - user.free_trials_used),
            ),
            usage=UsageStatus(
                can_use=allowed,
                reason=decision.reason,
                remaining_trials=decision.remaining_trials if allowed else 0,
                requires_subscription=not allowed,
            ),
            stats=stats,
            recent_payments=[
                PaymentSummary(
                    order_id=p.order_id,
                    payment_id=p.payment_id,
                    amount=p.amount,
                    currency=p.currency,
                    plan=p.plan,
                    status=p.status.value,
                    subscription_expires_at=p.subscription_expires_at,
                    created_at=p.created_at,
                )
                for p in payments
            ],
        )

        # Skipped if a ledger write landed while the summary was built
        self._cache.set(user_id, summary, generation=generation)
        return summary
