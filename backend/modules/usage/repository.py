"""
Usage history repositories.

Provides both in-memory (for testing) and Supabase-backed (for production)
storage for usage records.
"""

from datetime import datetime
from typing import Any, Optional

from shared.repository import BaseRepository
from .models import UsageRecord, UsageAction


class InMemoryUsageRepository:
    """
    Usage repository with in-memory storage.

    For testing and development. Use SupabaseUsageRepository for production.
    """

    def __init__(self) -> None:
        self._records: dict[str, list[UsageRecord]] = {}

    async def add(self, record: UsageRecord) -> UsageRecord:
        self._records.setdefault(record.user_id, []).insert(0, record)
        return record

    async def list_for_user(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[UsageRecord]:
        records = self._records.get(user_id, [])
        return [
            r for r in records
            if (start_date is None or r.created_at >= start_date)
            and (end_date is None or r.created_at <= end_date)
        ]


class SupabaseUsageRepository(BaseRepository[UsageRecord]):
    """Usage repository backed by the ``usage_history`` table."""

    TABLE = "usage_history"

    async def add(self, record: UsageRecord) -> UsageRecord:
        self._db.table(self.TABLE).insert({
            "id": record.id,
            "user_id": record.user_id,
            "action": record.action.value,
            "input_length": record.input_length,
            "output_length": record.output_length,
            "model": record.model,
            "tokens_used": record.tokens_used,
            "success": record.success,
            "error": record.error,
            "created_at": record.created_at.isoformat(),
        }).execute()
        return record

    async def list_for_user(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[UsageRecord]:
        query = self._db.table(self.TABLE).select("*").eq("user_id", user_id)

        if start_date:
            query = query.gte("created_at", start_date.isoformat())
        if end_date:
            query = query.lte("created_at", end_date.isoformat())

        result = query.order("created_at", desc=True).execute()
        return [self._map_to_record(r) for r in result.data]

    def _map_to_record(self, row: dict[str, Any]) -> UsageRecord:
        return UsageRecord(
            id=row["id"],
            user_id=row["user_id"],
            action=UsageAction(row["action"]),
            input_length=row.get("input_length") or 0,
            output_length=row.get("output_length") or 0,
            model=row.get("model"),
            tokens_used=row.get("tokens_used") or 0,
            success=row.get("success", True),
            error=row.get("error"),
            created_at=self._parse_timestamp(row["created_at"]),
        )
