"""
User repositories.

Provides both in-memory (for testing and local development) and
Supabase-backed (for production) implementations of IUserRepository.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from postgrest.exceptions import APIError

from shared.repository import BaseRepository
from .models import User
from .exceptions import EmailAlreadyRegisteredError, UserNotFoundError


def normalize_email(email: str) -> str:
    """Emails are stored and looked up lower-cased and stripped."""
    return email.strip().lower()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUserRepository:
    """
    User repository with in-memory storage.

    For testing and development. Use SupabaseUserRepository for production.
    Mutations hold a lock so conditional writes behave like single
    statements even when coroutines interleave.
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._ids_by_email: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        user_id = self._ids_by_email.get(normalize_email(email))
        if user_id is None:
            return None
        return await self.get_by_id(user_id)

    async def create(self, email: str, name: str, password_hash: str) -> User:
        email = normalize_email(email)
        async with self._lock:
            if email in self._ids_by_email:
                raise EmailAlreadyRegisteredError(email)
            user = User(
                id=str(uuid.uuid4()),
                email=email,
                name=name,
                password_hash=password_hash,
            )
            self._users[user.id] = user
            self._ids_by_email[email] = user.id
        return user.model_copy()

    async def record_login(self, user_id: str, at: datetime) -> None:
        async with self._lock:
            user = self._require(user_id)
            user.last_login_at = at
            user.updated_at = _now()

    async def set_active(self, user_id: str, is_active: bool) -> None:
        async with self._lock:
            user = self._require(user_id)
            user.is_active = is_active
            user.updated_at = _now()

    async def expire_subscription(
        self,
        user_id: str,
        expected_expires_at: Optional[datetime],
    ) -> bool:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None or not user.is_subscribed:
                return False
            if user.subscription_expires_at != expected_expires_at:
                return False
            user.is_subscribed = False
            user.subscription_expires_at = None
            user.updated_at = _now()
            return True

    async def increment_free_trials(self, user_id: str) -> Optional[int]:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None or user.is_subscribed:
                return None
            user.free_trials_used += 1
            user.updated_at = _now()
            return user.free_trials_used

    async def set_subscription(self, user_id: str, expires_at: datetime) -> User:
        async with self._lock:
            user = self._require(user_id)
            user.is_subscribed = True
            user.subscription_expires_at = expires_at
            user.updated_at = _now()
            return user.model_copy()

    def _require(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user


class SupabaseUserRepository(BaseRepository[User]):
    """
    User repository with Supabase persistence.

    Backed by the ``users`` table (see migrations/001_initial_schema.sql).
    """

    TABLE = "users"

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = self._db.table(self.TABLE).select("*").eq("id", user_id).execute()
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    async def get_by_email(self, email: str) -> Optional[User]:
        result = self._db.table(self.TABLE).select("*").eq(
            "email", normalize_email(email)
        ).execute()
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    async def create(self, email: str, name: str, password_hash: str) -> User:
        email = normalize_email(email)
        try:
            result = self._db.table(self.TABLE).insert({
                "id": str(uuid.uuid4()),
                "email": email,
                "name": name,
                "password_hash": password_hash,
                "is_active": True,
                "free_trials_used": 0,
                "is_subscribed": False,
            }).execute()
        except APIError as e:
            if self._is_unique_violation(e):
                raise EmailAlreadyRegisteredError(email)
            raise
        return self._map_to_user(result.data[0])

    async def record_login(self, user_id: str, at: datetime) -> None:
        self._db.table(self.TABLE).update({
            "last_login_at": at.isoformat(),
            "updated_at": _now().isoformat(),
        }).eq("id", user_id).execute()

    async def set_active(self, user_id: str, is_active: bool) -> None:
        result = self._db.table(self.TABLE).update({
            "is_active": is_active,
            "updated_at": _now().isoformat(),
        }).eq("id", user_id).execute()
        if not result.data:
            raise UserNotFoundError(user_id)

    async def expire_subscription(
        self,
        user_id: str,
        expected_expires_at: Optional[datetime],
    ) -> bool:
        query = self._db.table(self.TABLE).update({
            "is_subscribed": False,
            "subscription_expires_at": None,
            "updated_at": _now().isoformat(),
        }).eq("id", user_id).eq("is_subscribed", True)

        if expected_expires_at is None:
            query = query.is_("subscription_expires_at", "null")
        else:
            query = query.eq("subscription_expires_at", expected_expires_at.isoformat())

        result = query.execute()
        return bool(result.data)

    async def increment_free_trials(self, user_id: str) -> Optional[int]:
        # Single UPDATE ... WHERE NOT is_subscribed RETURNING, see migration
        result = self._db.rpc("increment_free_trials", {"p_user_id": user_id}).execute()
        return result.data if isinstance(result.data, int) else None

    async def set_subscription(self, user_id: str, expires_at: datetime) -> User:
        result = self._db.table(self.TABLE).update({
            "is_subscribed": True,
            "subscription_expires_at": expires_at.isoformat(),
            "updated_at": _now().isoformat(),
        }).eq("id", user_id).execute()
        if not result.data:
            raise UserNotFoundError(user_id)
        return self._map_to_user(result.data[0])

    def _map_to_user(self, row: dict[str, Any]) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            password_hash=row["password_hash"],
            is_active=row.get("is_active", True),
            free_trials_used=row.get("free_trials_used") or 0,
            is_subscribed=row.get("is_subscribed", False),
            subscription_expires_at=self._parse_timestamp(row.get("subscription_expires_at")),
            created_at=self._parse_timestamp(row.get("created_at")) or _now(),
            updated_at=self._parse_timestamp(row.get("updated_at")) or _now(),
            last_login_at=self._parse_timestamp(row.get("last_login_at")),
        )
