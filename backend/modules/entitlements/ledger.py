"""
Entitlement ledger.

Owns the per-user trial counter and subscription window, and answers
"may this user make a billable request right now?".

Every operation starts from derive_current_state(), a pure function of
the stored user and the clock. A lapsed subscription found there is
written back with a compare-and-set before the decision is returned, so
the stored flag is corrected lazily without a background job.
"""

import logging
from datetime import datetime
from typing import Optional

from modules.auth.interfaces import IUserRepository
from modules.auth.exceptions import UserNotFoundError
from modules.auth.models import User
from modules.auth.tokens import Clock, utc_now

from .cache import EntitlementCache
from .models import (
    FREE_TRIAL_LIMIT,
    TRIAL_EXHAUSTED_MESSAGE,
    Allowed,
    Decision,
    Denied,
    Entitlement,
    EntitlementReason,
    EntitlementState,
    LedgerSnapshot,
)

logger = logging.getLogger(__name__)

# Lost compare-and-set races before giving up on the write-back
MAX_CORRECTION_ATTEMPTS = 3


def derive_current_state(
    user: User,
    now: datetime,
    trial_limit: int = FREE_TRIAL_LIMIT,
) -> LedgerSnapshot:
    """
    Derive a user's entitlement state at ``now``.

    Pure: never touches storage. A subscription whose expiry is missing
    or not strictly in the future has lapsed; the returned user shows it
    cleared and ``correction_due`` is set.
    """
    expires_at = user.subscription_expires_at
    if user.is_subscribed and (expires_at is None or expires_at <= now):
        corrected = user.model_copy(
            update={"is_subscribed": False, "subscription_expires_at": None}
        )
        return LedgerSnapshot(
            user=corrected,
            state=_trial_state(corrected, trial_limit),
            correction_due=True,
        )

    if user.is_subscribed:
        return LedgerSnapshot(user=user, state=EntitlementState.SUBSCRIBED)

    return LedgerSnapshot(user=user, state=_trial_state(user, trial_limit))


def _trial_state(user: User, trial_limit: int) -> EntitlementState:
    if user.free_trials_used < trial_limit:
        return EntitlementState.TRIAL_ACTIVE
    return EntitlementState.TRIAL_EXHAUSTED


def decide(snapshot: LedgerSnapshot, trial_limit: int = FREE_TRIAL_LIMIT) -> Decision:
    """Turn a derived state into an Allowed/Denied decision."""
    if snapshot.state is EntitlementState.SUBSCRIBED:
        return Allowed(reason=EntitlementReason.SUBSCRIBED, remaining_trials=None)

    if snapshot.state is EntitlementState.TRIAL_ACTIVE:
        return Allowed(
            reason=EntitlementReason.FREE_TRIAL,
            remaining_trials=trial_limit - snapshot.user.free_trials_used,
        )

    return Denied(
        reason=EntitlementReason.TRIAL_EXHAUSTED,
        message=TRIAL_EXHAUSTED_MESSAGE,
    )


class EntitlementLedger:
    """
    Ledger over the credential store's entitlement fields.

    Args:
        users: Repository holding the user rows
        cache: Cache to invalidate after each mutation
        trial_limit: Free trials per user (never replenished)
        clock: Source of "now"; injectable for tests
    """

    def __init__(
        self,
        users: IUserRepository,
        cache: Optional[EntitlementCache] = None,
        trial_limit: int = FREE_TRIAL_LIMIT,
        clock: Optional[Clock] = None,
    ):
        self._users = users
        self._cache = cache
        self._trial_limit = trial_limit
        self._clock = clock or utc_now

    @property
    def trial_limit(self) -> int:
        return self._trial_limit

    async def can_use_service(self, user_id: str) -> Decision:
        """
        Decide whether a user may make a billable request.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        entitlement = await self.resolve(user_id)
        return entitlement.decision

    async def resolve(self, user_id: str) -> Entitlement:
        """
        Load a user, correct a lapsed subscription, and decide.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        snapshot = await self._load_current(user_id)
        return Entitlement(
            user=snapshot.user,
            decision=decide(snapshot, self._trial_limit),
        )

    async def increment_free_trial_usage(self, user_id: str) -> Optional[int]:
        """
        Consume one free trial.

        Subscribers are not charged: the increment is conditional on the
        stored row being unsubscribed and is a no-op otherwise.

        Returns:
            The new trial count, or None if nothing was incremented
        """
        # Correct first so a lapsed subscriber is charged like any trial user
        await self._load_current(user_id)

        new_count = await self._users.increment_free_trials(user_id)
        if new_count is not None:
            logger.info(f"User {user_id} has used {new_count}/{self._trial_limit} free trials")
            self._invalidate(user_id)
        return new_count

    async def activate_subscription(self, user_id: str, expires_at: datetime) -> User:
        """
        Put a user on a paid subscription until ``expires_at``.

        free_trials_used is left as it was.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        user = await self._users.set_subscription(user_id, expires_at)
        logger.info(f"Activated subscription for user {user_id} until {expires_at.isoformat()}")
        self._invalidate(user_id)
        return user

    async def _load_current(self, user_id: str) -> LedgerSnapshot:
        for _ in range(MAX_CORRECTION_ATTEMPTS):
            user = await self._users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            snapshot = derive_current_state(user, self._clock(), self._trial_limit)
            if not snapshot.correction_due:
                return snapshot

            expired = await self._users.expire_subscription(
                user_id, user.subscription_expires_at
            )
            if expired:
                logger.info(f"Subscription lapsed for user {user_id}")
                self._invalidate(user_id)
                return snapshot

            # Another writer changed the row between read and write
            logger.debug(f"Lost subscription correction race for user {user_id}, re-reading")

        logger.warning(f"Could not persist subscription lapse for user {user_id}")
        return snapshot

    def _invalidate(self, user_id: str) -> None:
        if self._cache is not None:
            self._cache.invalidate(user_id)
