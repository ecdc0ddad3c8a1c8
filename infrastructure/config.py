"""Runtime configuration read from environment variables"""
import os
from decimal import Decimal
from functools import lru_cache

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Engine and API settings"""
    tax_rate: Decimal = Field(default=Decimal("0.18"), ge=0)
    currency: str = "INR"
    cancellation_lead_hours: int = Field(default=24, ge=0)
    reference_prefix: str = Field(default="BK", min_length=1)
    reference_max_attempts: int = Field(default=3, ge=1)
    calendar_days: int = Field(default=30, ge=1)
    unavailable_dates_days: int = Field(default=90, ge=1)
    max_window_days: int = Field(default=366, ge=1)
    log_level: str = "INFO"

    # Auth (demo defaults; override in any real deployment)
    secret_key: str = "your-secret-key-keep-it-secret"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=30, ge=1)


_ENV_KEYS = {
    "tax_rate": "TAX_RATE",
    "currency": "CURRENCY",
    "cancellation_lead_hours": "CANCELLATION_LEAD_HOURS",
    "reference_prefix": "REFERENCE_PREFIX",
    "reference_max_attempts": "REFERENCE_MAX_ATTEMPTS",
    "calendar_days": "CALENDAR_DAYS",
    "unavailable_dates_days": "UNAVAILABLE_DATES_DAYS",
    "max_window_days": "MAX_WINDOW_DAYS",
    "log_level": "LOG_LEVEL",
    "secret_key": "SECRET_KEY",
    "algorithm": "JWT_ALGORITHM",
    "access_token_expire_minutes": "ACCESS_TOKEN_EXPIRE_MINUTES",
}


def load_settings(environ=None) -> Settings:
    """Build settings from an environment mapping; unset keys keep their defaults"""
    environ = os.environ if environ is None else environ
    values = {
        field: environ[key]
        for field, key in _ENV_KEYS.items()
        if environ.get(key) not in (None, "")
    }
    return Settings(**values)


@lru_cache
def get_settings() -> Settings:
    return load_settings()
