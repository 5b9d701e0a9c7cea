# barber_booking/config.py

from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./barber.db"
    sql_echo: bool = False

    # JWT
    secret_key: str = "change-me-later"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Booking rules
    booking_timezone: str = "Europe/Zagreb"
    default_slot_interval: int = 45
    cancellation_notice_hours: int = 6
    booking_horizon_days: int = 7  # customers pick from today + 6 days

    env: str = "development"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.booking_timezone)


settings = Settings()
