# charity_records/config.py
"""Application configuration with environment variables."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database holding the persisted document
    DATABASE_URL: str = "sqlite:///./charity.db"

    # Session cookie signing
    SECRET_KEY: str = "change-this-in-production"
    SESSION_MAX_AGE: int = 3600 * 12  # 12 hours

    ORGANIZATION_NAME: str = "مؤسسة الجارحي"

    # Automatic daily JSON backup
    BACKUP_DIR: str = "backups"
    AUTO_BACKUP_ENABLED: bool = True
    AUTO_BACKUP_INTERVAL_HOURS: int = 24

    BCRYPT_ROUNDS: int = 12

    # Optional JSON document replacing the built-in seed data
    SEED_DATA_PATH: Optional[str] = None

    # Employee id meaning "no specific employee responsible"
    VOLUNTEER_NATIONAL_ID: str = "VOLUNTEER"


settings = Settings()
