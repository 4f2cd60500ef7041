"""
Payment repositories.

Provides both in-memory (for testing) and Supabase-backed (for production)
storage for settled payments. Both enforce payment_id uniqueness.
"""

import asyncio
from decimal import Decimal
from typing import Any, Optional

from postgrest.exceptions import APIError

from shared.repository import BaseRepository
from .exceptions import DuplicatePaymentError
from .models import PaymentRecord, PaymentStatus


class InMemoryPaymentRepository:
    """
    Payment repository with in-memory storage.

    For testing and development. The payment_id index plays the role of
    the unique constraint on the payments table.
    """

    def __init__(self) -> None:
        self._records: dict[str, PaymentRecord] = {}
        self._by_payment_id: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get_by_payment_id(self, payment_id: str) -> Optional[PaymentRecord]:
        record_id = self._by_payment_id.get(payment_id)
        return self._records.get(record_id) if record_id else None

    async def add(self, record: PaymentRecord) -> PaymentRecord:
        async with self._lock:
            if record.payment_id in self._by_payment_id:
                raise DuplicatePaymentError(record.payment_id)
            self._records[record.id] = record
            self._by_payment_id[record.payment_id] = record.id
        return record

    async def delete(self, record_id: str) -> None:
        async with self._lock:
            record = self._records.pop(record_id, None)
            if record is not None:
                self._by_payment_id.pop(record.payment_id, None)

    async def list_for_user(self, user_id: str, limit: int = 10) -> list[PaymentRecord]:
        records = [r for r in self._records.values() if r.user_id == user_id]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]


class SupabasePaymentRepository(BaseRepository[PaymentRecord]):
    """Payment repository backed by the ``payments`` table."""

    TABLE = "payments"

    async def get_by_payment_id(self, payment_id: str) -> Optional[PaymentRecord]:
        result = self._db.table(self.TABLE).select("*").eq("payment_id", payment_id).execute()
        if not result.data:
            return None
        return self._map_to_record(result.data[0])

    async def add(self, record: PaymentRecord) -> PaymentRecord:
        try:
            self._db.table(self.TABLE).insert({
                "id": record.id,
                "user_id": record.user_id,
                "order_id": record.order_id,
                "payment_id": record.payment_id,
                "amount": str(record.amount),
                "currency": record.currency,
                "plan": record.plan,
                "status": record.status.value,
                "subscription_expires_at": (
                    record.subscription_expires_at.isoformat()
                    if record.subscription_expires_at else None
                ),
                "created_at": record.created_at.isoformat(),
            }).execute()
        except APIError as e:
            if self._is_unique_violation(e):
                raise DuplicatePaymentError(record.payment_id)
            raise
        return record

    async def delete(self, record_id: str) -> None:
        self._db.table(self.TABLE).delete().eq("id", record_id).execute()

    async def list_for_user(self, user_id: str, limit: int = 10) -> list[PaymentRecord]:
        result = (
            self._db.table(self.TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [self._map_to_record(r) for r in result.data]

    def _map_to_record(self, row: dict[str, Any]) -> PaymentRecord:
        return PaymentRecord(
            id=row["id"],
            user_id=row["user_id"],
            order_id=row["order_id"],
            payment_id=row["payment_id"],
            amount=Decimal(str(row["amount"])),
            currency=row["currency"],
            plan=row["plan"],
            status=PaymentStatus(row["status"]),
            subscription_expires_at=self._parse_timestamp(row.get("subscription_expires_at")),
            created_at=self._parse_timestamp(row["created_at"]),
        )
