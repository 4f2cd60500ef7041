"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
Services run on in-memory storage with a controllable clock; the payment
gateway and the text transformer are fakes (see tests/fakes.py).
"""

import asyncio
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import ServiceContainer
from shared.config import Settings
from modules.auth.passwords import hash_password
from modules.auth.repository import InMemoryUserRepository
from modules.auth.service import AuthService
from modules.auth.tokens import TokenIssuer
from modules.billing.repository import InMemoryPaymentRepository
from modules.billing.service import BillingService
from modules.entitlements.cache import EntitlementCache
from modules.entitlements.ledger import EntitlementLedger
from modules.usage.repository import InMemoryUsageRepository
from modules.usage.service import UsageRecorder

from tests.fakes import (
    TEST_KEY_ID,
    TEST_KEY_SECRET,
    FakeClock,
    FakePaymentGateway,
    FakeTextTransformer,
)

# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only-0123456789"

TEST_PASSWORD = "correct-horse"

# Hashing once keeps the suite fast; bcrypt is deliberately slow
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


def make_settings(**overrides) -> Settings:
    """Settings for tests: memory storage, no rate limits, fake credentials."""
    values = {
        "storage_backend": "memory",
        "jwt_secret": TEST_JWT_SECRET,
        "razorpay_key_id": TEST_KEY_ID,
        "razorpay_key_secret": TEST_KEY_SECRET,
        "openai_api_key": "",
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def create_user(
    users: InMemoryUserRepository,
    email: str = "test@example.com",
    name: str = "Test User",
    trials_used: int = 0,
):
    """Create a stored user that has already used ``trials_used`` trials."""
    user = await users.create(email=email, name=name, password_hash=_PASSWORD_HASH)
    for _ in range(trials_used):
        await users.increment_free_trials(user.id)
    return await users.get_by_id(user.id)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def cache() -> EntitlementCache:
    return EntitlementCache(ttl=180)


@pytest.fixture
def ledger(users, cache, clock) -> EntitlementLedger:
    return EntitlementLedger(users, cache=cache, clock=clock)


@pytest.fixture
def issuer(clock) -> TokenIssuer:
    return TokenIssuer(TEST_JWT_SECRET, ttl=timedelta(days=30), clock=clock)


@pytest.fixture
def auth_service(users, issuer, clock) -> AuthService:
    return AuthService(users, issuer, clock=clock)


@pytest.fixture
def recorder() -> UsageRecorder:
    return UsageRecorder(InMemoryUsageRepository())


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def payments() -> InMemoryPaymentRepository:
    return InMemoryPaymentRepository()


@pytest.fixture
def billing(gateway, payments, ledger, users, clock) -> BillingService:
    return BillingService(
        gateway=gateway,
        payments=payments,
        ledger=ledger,
        users=users,
        key_secret=TEST_KEY_SECRET,
        clock=clock,
    )


@pytest.fixture
def transformer() -> FakeTextTransformer:
    return FakeTextTransformer()


@pytest.fixture
def container(settings, clock, gateway, transformer) -> ServiceContainer:
    """A container on memory storage with fake collaborators."""
    return ServiceContainer(
        settings,
        gateway=gateway,
        transformer=transformer,
        clock=clock,
    )


@pytest.fixture
def app(container):
    return create_app(container=container)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registered(client, container):
    """
    Register a user through the API.

    Returns (user_id, token).
    """
    response = client.post(
        "/api/register",
        json={"email": "test@example.com", "name": "Test User", "password": TEST_PASSWORD},
    )
    assert response.status_code == 201
    body = response.json()
    return body["user"]["id"], body["token"]


@pytest.fixture
def auth_headers(registered) -> dict[str, str]:
    """Authorization headers for the registered user."""
    _, token = registered
    return {"Authorization": f"Bearer {token}"}


def run(coro):
    """Run a coroutine from a synchronous test (TestClient runs its own loop)."""
    return asyncio.run(coro)
