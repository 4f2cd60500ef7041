"""Tests for the usage summary and profile endpoints."""

from datetime import timedelta

from tests.conftest import run


class TestUsageSummary:
    def test_new_user(self, client, auth_headers):
        response = client.get("/api/user/usage", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == "test@example.com"
        assert data["user"]["freeTrialsRemaining"] == 10
        assert data["usage"] == {
            "canUse": True,
            "reason": "free_trial",
            "remainingTrials": 10,
            "requiresSubscription": False,
        }
        assert data["stats"] == []
        assert data["recentPayments"] == []

    def test_reflects_transforms(self, client, auth_headers):
        client.get("/api/user/usage", headers=auth_headers)
        client.post("/api/grammarize", json={"text": "one"}, headers=auth_headers)
        client.post("/api/grammarize", json={"text": "two"}, headers=auth_headers)

        data = client.get("/api/user/usage", headers=auth_headers).json()

        assert data["user"]["freeTrialsUsed"] == 2
        assert data["usage"]["remainingTrials"] == 8
        [stats] = data["stats"]
        assert stats["action"] == "grammarize"
        assert stats["count"] == 2
        assert stats["totalTokens"] == 84

    def test_exhausted(self, client, container, registered, auth_headers):
        user_id, _ = registered
        for _ in range(10):
            run(container.users.increment_free_trials(user_id))

        data = client.get("/api/user/usage", headers=auth_headers).json()

        assert data["usage"]["canUse"] is False
        assert data["usage"]["reason"] == "trial_exhausted"
        assert data["usage"]["requiresSubscription"] is True

    def test_requires_auth(self, client):
        assert client.get("/api/user/usage").status_code == 401


class TestCurrentUser:
    def test_me(self, client, registered, auth_headers):
        user_id, _ = registered
        response = client.get("/api/users/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {
            "id": user_id,
            "email": "test@example.com",
            "name": "Test User",
            "freeTrialsUsed": 0,
            "isSubscribed": False,
            "subscriptionExpiresAt": None,
        }

    def test_me_with_token_in_query(self, client, registered):
        _, token = registered
        response = client.get(f"/api/users/me?token={token}")
        assert response.status_code == 200

    def test_me_shows_lapsed_subscription_as_lapsed(self, client, container, registered, auth_headers, clock):
        user_id, _ = registered
        run(container.ledger.activate_subscription(user_id, clock() + timedelta(days=1)))
        clock.advance(days=2)

        data = client.get("/api/users/me", headers=auth_headers).json()

        assert data["isSubscribed"] is False
        assert data["subscriptionExpiresAt"] is None

    def test_me_requires_auth(self, client):
        response = client.get("/api/users/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
