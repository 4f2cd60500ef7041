"""
Usage tracking module interface.

Other modules should depend on IUsageRecorder, not the concrete implementation.
The transformation flow records every attempt through it; the usage
summary reads the per-action stats.
"""

from typing import Protocol, Optional, runtime_checkable
from datetime import datetime

from .models import UsageRecord, UsageAction, ActionStats


@runtime_checkable
class IUsageRepository(Protocol):
    """Append-only storage for usage records."""

    async def add(self, record: UsageRecord) -> UsageRecord:
        """Persist a record."""
        ...

    async def list_for_user(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[UsageRecord]:
        """List a user's records, most recent first."""
        ...


@runtime_checkable
class IUsageRecorder(Protocol):
    """
    Interface for usage recording.

    Recording is best-effort: storage failures are logged and never
    propagate into the request that caused them.
    """

    async def record(
        self,
        user_id: str,
        action: UsageAction,
        input_length: int,
        output_length: int = 0,
        model: Optional[str] = None,
        tokens_used: int = 0,
        success: bool = True,
        error: Optional[str] = None,
    ) -> Optional[UsageRecord]:
        """
        Append a usage record.

        Returns:
            The saved record, or None if storage failed
        """
        ...

    async def get_stats(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[ActionStats]:
        """
        Aggregate a user's usage per action.

        Args:
            user_id: User ID
            start_date: Optional start of date range
            end_date: Optional end of date range

        Returns:
            One entry per action the user has run
        """
        ...
