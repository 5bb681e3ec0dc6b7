from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App environment
    env: str = Field(default="development", alias="ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./dev.db", alias="DATABASE_URL")

    # Telegram notifier
    telegram_bot_token: Optional[str] = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    telegram_api_base: str = Field(default="https://api.telegram.org", alias="TELEGRAM_API_BASE")
    notifier_timeout_seconds: float = Field(default=10.0, alias="NOTIFIER_TIMEOUT_SECONDS")

    # Reminder settings
    reminders_enabled: bool = Field(default=True, alias="REMINDERS_ENABLED")
    reminder_poll_interval_seconds: int = Field(default=30, alias="REMINDER_POLL_INTERVAL_SECONDS")
    reminder_batch_limit: int = Field(default=100, alias="REMINDER_BATCH_LIMIT")  # Max reminders per discovery pass
    reminder_max_tracked: int = Field(default=100_000, alias="REMINDER_MAX_TRACKED")  # Scheduling set is cleared above this
    reminder_message_max_length: int = Field(default=500, alias="REMINDER_MESSAGE_MAX_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
