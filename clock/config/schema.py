"""Configuration schema using Pydantic."""

from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Root configuration for clock.

    Values come from `CLOCK_*` environment variables or a `.env` file in the
    working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: str | None = Field(default=None, description="Overrides the platform app-data directory")
    ledger_file: str = "timetable.json"
    timezone: str | None = Field(default=None, description="IANA zone for display and day bucketing")
    log_level: str = "WARNING"
    break_minutes: int = Field(default=30, ge=1, description="Fixed deduction per break marker")
    list_limit: int = Field(default=5, ge=1)

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {value}") from e
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def tz(self) -> tzinfo | None:
        """Display timezone; None means the system local zone."""
        return ZoneInfo(self.timezone) if self.timezone else None
