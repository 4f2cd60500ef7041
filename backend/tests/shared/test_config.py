"""Tests for settings loading and startup validation."""

import logging

import pytest

from shared.config import Settings, validate_settings

from tests.conftest import TEST_JWT_SECRET, make_settings


class TestDefaults:
    def test_business_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.free_trial_limit == 10
        assert settings.subscription_days == 30
        assert settings.token_ttl_days == 30
        assert settings.jwt_algorithm == "HS256"
        assert settings.entitlement_cache_ttl == 180

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("FREE_TRIAL_LIMIT", "3")
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        settings = Settings(_env_file=None)
        assert settings.free_trial_limit == 3
        assert settings.storage_backend == "memory"


class TestValidateSettings:
    def test_valid(self):
        validate_settings(make_settings())

    def test_missing_jwt_secret(self):
        with pytest.raises(RuntimeError, match="JWT_SECRET"):
            validate_settings(make_settings(jwt_secret=""))

    def test_supabase_storage_needs_credentials(self):
        settings = make_settings(storage_backend="supabase", supabase_url="", supabase_service_role_key="")
        with pytest.raises(RuntimeError) as exc_info:
            validate_settings(settings)
        assert "SUPABASE_URL" in str(exc_info.value)
        assert "SUPABASE_SERVICE_ROLE_KEY" in str(exc_info.value)

    def test_memory_storage_needs_no_supabase(self):
        validate_settings(make_settings(supabase_url=""))

    def test_warns_about_short_secret(self, caplog):
        with caplog.at_level(logging.WARNING, logger="shared.config"):
            validate_settings(make_settings(jwt_secret="short"))
        assert "JWT_SECRET" in caplog.text

    def test_warns_about_missing_collaborators(self, caplog):
        with caplog.at_level(logging.WARNING, logger="shared.config"):
            validate_settings(make_settings(jwt_secret=TEST_JWT_SECRET, razorpay_key_id=""))
        assert "Razorpay" in caplog.text
        assert "OPENAI_API_KEY" in caplog.text
