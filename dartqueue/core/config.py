"""Bot process configuration"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# === Path Configuration ===
PACKAGE_DIR = Path(__file__).parent.parent
PROJECT_DIR = PACKAGE_DIR.parent
DATA_DIR = PROJECT_DIR / "data"

COMMAND_PREFIX = "!"

# Scopes the bot account token must carry
BOT_SCOPES = [
    "user:bot",  # Bot identifier
    "user:read:chat",  # Read chat messages
    "user:write:chat",  # Send chat messages
]


class BotSettings(BaseSettings):
    """Bot settings"""

    model_config = SettingsConfigDict(
        env_file=PROJECT_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Twitch OAuth
    client_id: str = Field(..., description="Twitch OAuth Client ID")
    client_secret: str = Field(..., description="Twitch OAuth Client Secret")

    # Bot account
    bot_id: str = Field(..., description="Bot User ID")
    bot_token: str = Field(..., description="Bot user access token")
    bot_refresh_token: str = Field(default="", description="Bot user refresh token")
    owner_id: str = Field(default="", description="Owner User ID")

    # Storage / serving
    data_dir: Path = Field(default=DATA_DIR, description="Directory for JSON documents")
    overlay_dir: Path | None = Field(default=None, description="Display/admin pages directory")
    host: str = Field(default="127.0.0.1", description="HTTP/WebSocket bind address")

    # Chat command words
    join_command: str = Field(default="!jonoon", description="Join the queue")
    leave_command: str = Field(default="!peru", description="Leave the queue")
    list_command: str = Field(default="!jono", description="Show the queue")
    advance_command: str = Field(default="!seuraava", description="Advance the queue (mod+)")
    stats_command: str = Field(default="!stats", description="Show own stats")

    # Scheduler
    announcement_poll_seconds: float = Field(default=5.0, gt=0, description="Announcement tick")

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("client_id", "client_secret", "bot_id", "bot_token")
    @classmethod
    def validate_required(cls, v: str) -> str:
        """Reject blank credentials"""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator(
        "join_command", "leave_command", "list_command", "advance_command", "stats_command"
    )
    @classmethod
    def validate_command_word(cls, v: str) -> str:
        """Command words are matched lower-cased and must carry the prefix"""
        v = v.strip().lower()
        if len(v) < 2 or not v.startswith(COMMAND_PREFIX):
            raise ValueError(f"command words must start with '{COMMAND_PREFIX}'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper


@lru_cache
def get_settings() -> BotSettings:
    """Get cached settings instance"""
    return BotSettings()  # type: ignore[call-arg]


def validate_env_vars() -> BotSettings:
    """Validate required environment variables.

    Raises ValueError listing every missing or invalid field.
    """
    try:
        settings = get_settings()
    except Exception as e:
        bot_logger = logging.getLogger("Bot")
        bot_logger.error(f"Environment validation failed: {e}")
        raise ValueError(str(e)) from e
    logger.info("All required environment variables validated successfully")
    return settings
