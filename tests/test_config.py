# =============================================================================
# tests/test_config.py - Settings Tests
# =============================================================================
# Required Supabase values come from the env vars conftest.py sets.
# =============================================================================

import pytest
from pydantic import ValidationError

from app.config import DEV_SECRET_KEY, Settings


class TestSecretKey:

    def test_dev_key_refused_in_production(self):
        with pytest.raises(ValidationError, match="SECRET_KEY must be set in production"):
            Settings(_env_file=None, ENVIRONMENT="production", SECRET_KEY=DEV_SECRET_KEY)

    def test_dev_key_allowed_in_development(self):
        config = Settings(_env_file=None, ENVIRONMENT="development", SECRET_KEY=DEV_SECRET_KEY)
        assert config.cookie_secure is False

    def test_production_with_real_key(self):
        config = Settings(_env_file=None, ENVIRONMENT="production", SECRET_KEY="a-real-production-secret")

        assert config.is_production
        assert config.cookie_secure is True


class TestDerivedValues:

    def test_cors_origins_list(self):
        config = Settings(_env_file=None, CORS_ORIGINS="http://a.test, https://b.test")
        assert config.cors_origins_list == ["http://a.test", "https://b.test"]

    def test_session_max_age(self):
        assert Settings(_env_file=None, SESSION_EXPIRES_DAYS=5).session_max_age_seconds == 432000

    def test_billing_enabled_by_key(self):
        assert Settings(_env_file=None, STRIPE_SECRET_KEY="").billing_enabled is False
        assert Settings(_env_file=None, STRIPE_SECRET_KEY="sk_test_1").billing_enabled is True
