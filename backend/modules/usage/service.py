"""
Usage recording service implementation.

Appends one record per transformation attempt and aggregates them for
the usage dashboard.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from .interfaces import IUsageRepository
from .models import UsageRecord, UsageAction, ActionStats

logger = logging.getLogger(__name__)


class UsageRecorder:
    """
    Usage recorder over a pluggable repository.

    Works with both InMemoryUsageRepository and SupabaseUsageRepository.
    """

    def __init__(self, repository: IUsageRepository):
        self._repository = repository

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
        record = UsageRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            action=action,
            input_length=input_length,
            output_length=output_length,
            model=model,
            tokens_used=tokens_used,
            success=success,
            error=error,
        )

        try:
            return await self._repository.add(record)
        except Exception as e:
            # Usage history must never break the request it describes
            logger.error(f"Failed to record {action.value} usage for user {user_id}: {e}")
            return None

    async def get_stats(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[ActionStats]:
        records = await self._repository.list_for_user(
            user_id,
            start_date=start_date,
            end_date=end_date,
        )

        by_action: dict[UsageAction, ActionStats] = {}
        for record in records:
            stats = by_action.get(record.action)
            if stats is None:
                stats = by_action[record.action] = ActionStats(action=record.action)
            stats.count += 1
            stats.total_tokens += record.tokens_used
            stats.total_input_length += record.input_length
            stats.total_output_length += record.output_length

        return list(by_action.values())
