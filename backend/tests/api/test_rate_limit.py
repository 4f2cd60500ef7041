"""Tests for per-client rate limiting."""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import ServiceContainer
from api.middleware.rate_limit import RateLimiter, build_rate_limiters
from shared.exceptions import RateLimitError

from tests.conftest import make_settings
from tests.fakes import FakePaymentGateway, FakeTextTransformer


class ManualTimer:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def timer():
    return ManualTimer()


class TestRateLimiter:
    def test_allows_up_to_limit(self, timer):
        limiter = RateLimiter("test", max_requests=3, window_seconds=60, timer=timer)
        for _ in range(3):
            limiter.hit("1.2.3.4")

        with pytest.raises(RateLimitError) as exc_info:
            limiter.hit("1.2.3.4")
        assert exc_info.value.code == "RATE_LIMITED"
        assert exc_info.value.retry_after == 60

    def test_clients_are_counted_separately(self, timer):
        limiter = RateLimiter("test", max_requests=1, window_seconds=60, timer=timer)
        limiter.hit("1.1.1.1")
        limiter.hit("2.2.2.2")
        with pytest.raises(RateLimitError):
            limiter.hit("1.1.1.1")

    def test_retry_after_counts_down(self, timer):
        limiter = RateLimiter("test", max_requests=1, window_seconds=60, timer=timer)
        limiter.hit("client")
        timer.now += 45
        with pytest.raises(RateLimitError) as exc_info:
            limiter.hit("client")
        assert exc_info.value.retry_after == 15

    def test_window_resets(self, timer):
        limiter = RateLimiter("test", max_requests=1, window_seconds=60, timer=timer)
        limiter.hit("client")
        timer.now += 61
        limiter.hit("client")

    def test_disabled(self, timer):
        limiter = RateLimiter("test", max_requests=1, window_seconds=60, enabled=False, timer=timer)
        for _ in range(5):
            limiter.hit("client")

    def test_reset(self, timer):
        limiter = RateLimiter("test", max_requests=1, window_seconds=60, timer=timer)
        limiter.hit("client")
        limiter.reset()
        limiter.hit("client")


def test_named_limiters_follow_settings():
    limiters = build_rate_limiters(make_settings(rate_limit_enabled=True))
    assert set(limiters) == {"auth", "api", "payment", "read"}
    assert (limiters["auth"].max_requests, limiters["auth"].window_seconds) == (5, 900)
    assert (limiters["api"].max_requests, limiters["api"].window_seconds) == (100, 900)
    assert (limiters["payment"].max_requests, limiters["payment"].window_seconds) == (10, 3600)
    assert (limiters["read"].max_requests, limiters["read"].window_seconds) == (30, 60)
    assert all(limiter.enabled for limiter in limiters.values())


def test_login_is_rate_limited(clock):
    settings = make_settings(rate_limit_enabled=True, rate_limit_auth_requests=2)
    container = ServiceContainer(
        settings,
        gateway=FakePaymentGateway(),
        transformer=FakeTextTransformer(),
        clock=clock,
    )
    body = {"email": "ghost@example.com", "password": "whatever"}

    with TestClient(create_app(container=container)) as client:
        assert client.post("/api/login", json=body).status_code == 401
        assert client.post("/api/login", json=body).status_code == 401
        response = client.post("/api/login", json=body)

        assert response.status_code == 429
        assert response.json()["error"] == "RATE_LIMITED"
        assert response.json()["message"].startswith("Too many login attempts")
        assert int(response.headers["Retry-After"]) > 0

        # Other limiters are unaffected
        assert client.get("/api/health").status_code == 200
