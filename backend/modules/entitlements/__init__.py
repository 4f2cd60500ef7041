"""
Entitlements module.

Decides whether a user may make a billable request and moves users
between free trial and paid subscription.

Public API:
- EntitlementLedger, derive_current_state, decide
- RequestGate / GateContext
- EntitlementCache
- UsageSummaryService
- Allowed / Denied decisions and EntitlementExceededError
"""

from .models import (
    FREE_TRIAL_LIMIT,
    TRIAL_EXHAUSTED_MESSAGE,
    EntitlementState,
    EntitlementReason,
    Allowed,
    Denied,
    Decision,
    Entitlement,
    LedgerSnapshot,
    SummaryUser,
    UsageStatus,
    PaymentSummary,
    UsageSummary,
)
from .exceptions import EntitlementExceededError
from .interfaces import IPaymentHistory
from .cache import EntitlementCache
from .ledger import EntitlementLedger, derive_current_state, decide
from .gate import RequestGate, GateContext
from .summary import UsageSummaryService

__all__ = [
    # Models
    "FREE_TRIAL_LIMIT",
    "TRIAL_EXHAUSTED_MESSAGE",
    "EntitlementState",
    "EntitlementReason",
    "Allowed",
    "Denied",
    "Decision",
    "Entitlement",
    "LedgerSnapshot",
    "SummaryUser",
    "UsageStatus",
    "PaymentSummary",
    "UsageSummary",
    # Exceptions
    "EntitlementExceededError",
    # Interfaces
    "IPaymentHistory",
    # Services
    "EntitlementCache",
    "EntitlementLedger",
    "derive_current_state",
    "decide",
    "RequestGate",
    "GateContext",
    "UsageSummaryService",
]
