"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

from pydantic import model_validator
from pydantic_settings import BaseSettings

VALID_ENVS = frozenset({"development", "staging", "production"})


class Settings(BaseSettings):
    """cribbot configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Discord
    discord_bot_token: str = ""
    discord_guild_id: str = ""
    discord_enabled: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///cribbot.db"

    # Environment
    cribbot_env: str = "development"

    # Games
    cribbot_picker_timeout_seconds: float = 60.0
    cribbot_session_interactions: int = 60  # Rounds per /play before the session closes

    # Spam event
    cribbot_spam_join_seconds: int = 60
    cribbot_spam_duration_seconds: int = 60
    cribbot_spam_min_messages: int = 15
    cribbot_spam_max_players: int = 30
    cribbot_spam_min_players: int = 3

    # HTTP server
    cribbot_host: str = "127.0.0.1"
    cribbot_port: int = 8000

    # Logging
    cribbot_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_env(self) -> Settings:
        if self.cribbot_env not in VALID_ENVS:
            msg = f"CRIBBOT_ENV must be one of {sorted(VALID_ENVS)}, got {self.cribbot_env!r}"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _require_token_in_production(self) -> Settings:
        """A production deployment with Discord enabled must carry a bot token."""
        if self.cribbot_env == "production" and self.discord_enabled and not self.discord_bot_token:
            raise ValueError("DISCORD_BOT_TOKEN must be set when DISCORD_ENABLED in production.")
        return self
