"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from cribbot.config import Settings


class TestEnvironment:
    def test_defaults(self) -> None:
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
        assert settings.cribbot_env == "development"
        assert settings.cribbot_session_interactions == 60
        assert settings.cribbot_spam_min_messages == 15

    def test_unknown_env_rejected(self) -> None:
        with pytest.raises(ValidationError, match="CRIBBOT_ENV"):
            Settings(cribbot_env="qa", database_url="sqlite+aiosqlite:///:memory:")

    def test_env_var_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRIBBOT_PICKER_TIMEOUT_SECONDS", "5")
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
        assert settings.cribbot_picker_timeout_seconds == 5.0


class TestProductionToken:
    def test_production_with_discord_requires_token(self) -> None:
        with pytest.raises(ValidationError, match="DISCORD_BOT_TOKEN"):
            Settings(
                cribbot_env="production",
                discord_enabled=True,
                discord_bot_token="",
                database_url="sqlite+aiosqlite:///:memory:",
            )

    def test_production_without_discord_is_fine(self) -> None:
        settings = Settings(
            cribbot_env="production",
            discord_enabled=False,
            database_url="sqlite+aiosqlite:///:memory:",
        )
        assert settings.cribbot_env == "production"

    def test_development_without_token_is_fine(self) -> None:
        settings = Settings(
            cribbot_env="development",
            discord_enabled=True,
            database_url="sqlite+aiosqlite:///:memory:",
        )
        assert settings.discord_bot_token == ""
