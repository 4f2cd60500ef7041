"""
Usage tracking module.

Handles the append-only usage history and token estimates.

Public API:
- IUsageRecorder / UsageRecorder: record attempts, aggregate stats
- IUsageRepository: storage (in-memory and Supabase implementations)
- UsageRecord, UsageAction, ActionStats
"""

from .interfaces import IUsageRecorder, IUsageRepository
from .models import UsageRecord, UsageAction, ActionStats
from .repository import InMemoryUsageRepository, SupabaseUsageRepository
from .service import UsageRecorder
from .token_counter import count_tokens, estimate_exchange_tokens

__all__ = [
    # Interfaces
    "IUsageRecorder",
    "IUsageRepository",
    # Models
    "UsageRecord",
    "UsageAction",
    "ActionStats",
    # Repositories
    "InMemoryUsageRepository",
    "SupabaseUsageRepository",
    # Service
    "UsageRecorder",
    # Token counting
    "count_tokens",
    "estimate_exchange_tokens",
]
