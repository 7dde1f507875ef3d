# backend/provider_calendar/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    database_url: str = "sqlite:///./provider_calendar.db"
    redis_url: str | None = None
    log_level: str = "INFO"

    # Defaults for new AvailabilitySettings rows
    calendar_default_timezone: str = "Asia/Bahrain"
    calendar_default_slot_duration_minutes: int = 30
    calendar_default_buffer_before_minutes: int = 0
    calendar_default_buffer_after_minutes: int = 0
    calendar_default_min_advance_hours: int = 24
    calendar_default_max_advance_days: int = 30

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # relative sqlite path → absolute, anchored at project root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
