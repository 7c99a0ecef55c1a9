"""Application settings loaded from environment variables."""

import logging
import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Taskflow configuration. All values come from environment variables."""

    # Storage
    database_path: Path = Field(default=Path("data/taskflow.db"))

    # Reminders
    scheduler_timezone: str = Field(default="UTC")
    store_poll_seconds: float = Field(default=5.0)

    # Notifications
    desktop_notifications_enabled: bool = Field(default=True)
    console_alerts_enabled: bool = Field(default=True)
    sound_enabled: bool = Field(default=True)
    notification_app_name: str = Field(default="Taskflow")
    notification_timeout_seconds: int = Field(default=10)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="TASKFLOW_", env_file=_env_file(), env_file_encoding="utf-8"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_log_level(self) -> int:
        """Resolve LOG_LEVEL to a logging level, falling back to INFO."""
        level = logging.getLevelName(self.log_level.strip().upper())
        return level if isinstance(level, int) else logging.INFO


settings = Settings()
