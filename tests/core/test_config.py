"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from keeper.core.config import DEFAULT_SECRET_KEY, Settings


class TestSecretKeyGuard:
    """Tests for the shipped signing key outside development."""

    @pytest.mark.parametrize("environment", ["staging", "production"])
    def test_default_key_refused(self, environment):
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None, ENVIRONMENT=environment)
        assert "SECRET_KEY" in str(exc_info.value)

    def test_explicit_key_accepted_in_production(self):
        settings = Settings(_env_file=None, ENVIRONMENT="production", SECRET_KEY="a-real-key")

        assert settings.SECRET_KEY.get_secret_value() == "a-real-key"

    @pytest.mark.parametrize("environment", ["development", "testing"])
    def test_default_key_allowed_locally(self, environment):
        settings = Settings(_env_file=None, ENVIRONMENT=environment)

        assert settings.SECRET_KEY.get_secret_value() == DEFAULT_SECRET_KEY


class TestProviderSettings:
    """Tests for provider credentials."""

    def test_app_secret_is_hidden(self):
        settings = Settings(_env_file=None, FACEBOOK_APP_ID="app", FACEBOOK_APP_SECRET="hush")

        assert settings.FACEBOOK_APP_SECRET.get_secret_value() == "hush"
        assert "hush" not in repr(settings)

    def test_redirect_settings_are_not_read(self):
        settings = Settings(_env_file=None, GOOGLE_CALLBACK_URL="http://x/cb")

        assert not hasattr(settings, "GOOGLE_CALLBACK_URL")
