import logging
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
DEFAULT_TIMEZONE = "UTC"
DEFAULT_WEEK_START = "sunday"


class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Storage (unset = in-memory repository)
    DATABASE_URL: Optional[str] = None

    # Calendar semantics for "today" and time-of-day badges
    LOCAL_TIMEZONE: str = DEFAULT_TIMEZONE
    WEEK_START: str = DEFAULT_WEEK_START

    # HTTP
    CORS_ORIGINS: str = "http://localhost:5173"  # comma-separated

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def tzinfo(self) -> ZoneInfo:
        """Configured zone; UTC when the name is unknown (validate_config warns)."""
        try:
            return ZoneInfo(self.LOCAL_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            return ZoneInfo(DEFAULT_TIMEZONE)

    @property
    def week_start_index(self) -> int:
        """Python weekday number (Monday=0) of the configured week start, Sunday if unrecognized."""
        name = self.WEEK_START.strip().lower()
        if name not in WEEKDAY_NAMES:
            name = DEFAULT_WEEK_START
        return WEEKDAY_NAMES.index(name)

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate calendar configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Returns False when a problem was found and only warned about.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("diaryquest")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    problems = []
    try:
        ZoneInfo(cfg.LOCAL_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        problems.append(f"LOCAL_TIMEZONE={cfg.LOCAL_TIMEZONE!r} is not a known IANA zone")
    if cfg.WEEK_START.strip().lower() not in WEEKDAY_NAMES:
        problems.append(f"WEEK_START={cfg.WEEK_START!r} is not a weekday name")

    if problems:
        message = f"Invalid configuration: {'; '.join(problems)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(f"{message}; falling back to {DEFAULT_TIMEZONE} and {DEFAULT_WEEK_START} week start")
        return False

    return True
