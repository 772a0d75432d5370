# carwash/config.py

import logging
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_SECRET_KEY = "change-me-later"


class Settings(BaseSettings):
    """Application settings, read from the environment and `.env`."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    environment: str = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./carwash.db"
    seed_catalogue: bool = True

    # Auth
    secret_key: str = DEV_SECRET_KEY
    access_token_expire_minutes: int = 30
    admin_email: str = "admin@carwash.local"
    admin_password: str = "admin123456"

    # reCAPTCHA v3
    recaptcha_secret_key: Optional[str] = None
    recaptcha_min_score: float = 0.6

    # Booking rules
    slot_interval_minutes: int = 30
    cancellation_notice_hours: int = 24
    modification_notice_hours: int = 2
    no_show_grace_minutes: int = 30

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("slot_interval_minutes")
    @classmethod
    def check_slot_interval(cls, value: int) -> int:
        if value <= 0 or value > 240:
            raise ValueError("slot_interval_minutes must be between 1 and 240")
        return value

    @model_validator(mode="after")
    def check_production_secret(self):
        if self.environment == "production":
            if self.secret_key == DEV_SECRET_KEY or len(self.secret_key) < 32:
                raise ValueError("SECRET_KEY must be set to at least 32 characters in production")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
