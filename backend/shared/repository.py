"""
Base repository class for database access.

Provides a common abstraction layer for the Supabase-backed repositories,
encapsulating client access and shared helpers for row mapping and
constraint handling.
"""

from datetime import datetime
from typing import TypeVar, Generic, Optional

from postgrest.exceptions import APIError
from supabase import Client


T = TypeVar("T")

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class BaseRepository(Generic[T]):
    """
    Base class for Supabase repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - Timestamp parsing and unique-violation detection

    Subclasses implement domain-specific data access methods and
    handle dict-to-Pydantic model mapping internally.

    Example:
        class PaymentRepository(BaseRepository[PaymentRecord]):
            async def get_by_payment_id(self, payment_id: str) -> Optional[PaymentRecord]:
                result = self._db.table("payments").select("*").eq("payment_id", payment_id).execute()
                if not result.data:
                    return None
                return self._map_to_payment(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    @staticmethod
    def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
        """Parse an ISO timestamp returned by PostgREST."""
        if not value:
            return None
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    @staticmethod
    def _is_unique_violation(error: APIError) -> bool:
        """Whether a PostgREST error was caused by a unique constraint."""
        return error.code == UNIQUE_VIOLATION
