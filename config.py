# ─────────────────────────────────────────────────────────────────
# config.py - Application Settings
#
# Every value can be overridden by an environment variable of the
# same name (case insensitive) or a local .env file, e.g.
#   PORT=9000 AUTO_REGISTER_DEVICES=false python main.py
# ─────────────────────────────────────────────────────────────────

from datetime import timedelta
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from validation import TimestampPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    APP_TITLE: str = "Device Telemetry API"
    APP_VERSION: str = "1.0.0"

    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # CSV with a header row and one device id per line (first column)
    DEVICES_CSV: Path = Path("devices.csv")

    # True  → unknown devices are created on their first heartbeat/upload
    # False → they get a 404 until registered via CSV or POST /api/v1/devices
    AUTO_REGISTER_DEVICES: bool = True

    # Sanity window for sent_at, relative to the server clock
    ENFORCE_TIMESTAMP_WINDOW: bool = True
    MAX_TIMESTAMP_AGE_SECONDS: int = 24 * 3600
    MAX_CLOCK_SKEW_SECONDS: int = 5 * 60

    LOG_LEVEL: str = "INFO"

    @field_validator("PORT", mode="before")
    @classmethod
    def _strip_colon(cls, value):
        # Accept the ":8080" form as well as "8080"
        if isinstance(value, str):
            return value.strip().lstrip(":")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def timestamp_policy(self) -> TimestampPolicy:
        return TimestampPolicy(
            enabled=self.ENFORCE_TIMESTAMP_WINDOW,
            max_age=timedelta(seconds=self.MAX_TIMESTAMP_AGE_SECONDS),
            max_future=timedelta(seconds=self.MAX_CLOCK_SKEW_SECONDS),
        )


def get_settings() -> Settings:
    return Settings()
