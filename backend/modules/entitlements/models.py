"""
Entitlement module data models.

A decision is a tagged union: Allowed or Denied, told apart by the
``allowed`` literal. Handlers match on the type, never on ad hoc fields.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from shared.models import CamelModel
from modules.auth.models import User, UserEntitlementView
from modules.usage.models import ActionStats

FREE_TRIAL_LIMIT = 10

TRIAL_EXHAUSTED_MESSAGE = (
    "Free trial exhausted. Please subscribe to continue using the service."
)


class EntitlementState(str, Enum):
    """Where a user sits in the trial/subscription lifecycle."""

    SUBSCRIBED = "subscribed"
    TRIAL_ACTIVE = "trial_active"
    TRIAL_EXHAUSTED = "trial_exhausted"


class EntitlementReason(str, Enum):
    """Why a decision came out the way it did."""

    SUBSCRIBED = "subscribed"
    FREE_TRIAL = "free_trial"
    TRIAL_EXHAUSTED = "trial_exhausted"


class Allowed(BaseModel):
    """The user may make a billable request."""

    allowed: Literal[True] = True
    reason: EntitlementReason
    remaining_trials: Optional[int] = Field(
        None,
        description="Trials left; None for subscribers",
    )

    model_config = {"frozen": True}


class Denied(BaseModel):
    """The user has no entitlement left."""

    allowed: Literal[False] = False
    reason: EntitlementReason
    message: str

    model_config = {"frozen": True}


Decision = Union[Allowed, Denied]


class LedgerSnapshot(BaseModel):
    """
    Result of deriving the current state of a stored user.

    ``user`` is the corrected view: when the stored subscription has
    lapsed it already shows the user unsubscribed, and
    ``correction_due`` tells the ledger to write that back.
    """

    user: User
    state: EntitlementState
    correction_due: bool = False


class Entitlement(BaseModel):
    """A corrected user together with their current decision."""

    user: User
    decision: Decision


class SummaryUser(UserEntitlementView):
    """User fields shown on the usage dashboard."""

    free_trials_remaining: int = 0


class UsageStatus(CamelModel):
    """Entitlement decision flattened for clients."""

    can_use: bool
    reason: EntitlementReason
    remaining_trials: Optional[int] = None
    requires_subscription: bool = False


class PaymentSummary(CamelModel):
    """A past payment as shown on the usage dashboard."""

    order_id: str
    payment_id: str
    amount: Decimal
    currency: str
    plan: str
    status: str
    subscription_expires_at: Optional[datetime] = None
    created_at: datetime


class UsageSummary(CamelModel):
    """
    Composite usage view for GET /user/usage.

    This is the only entitlement data that is ever served from cache.
    """

    user: SummaryUser
    usage: UsageStatus
    stats: list[ActionStats] = Field(default_factory=list)
    recent_payments: list[PaymentSummary] = Field(default_factory=list)
