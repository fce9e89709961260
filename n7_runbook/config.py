from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the n7-runbook project root (two levels up from this file)
_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    """
    Runbook Configuration.
    Reads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(env_file=str(_ENV_FILE), env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # Functionality
    ENVIRONMENT: Literal["development", "production", "testing"] = "development"
    LOG_LEVEL: str = "INFO"

    # API
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8700

    # Status persistence
    STORAGE_BACKEND: Literal["file", "sql", "memory"] = "file"
    STORAGE_KEY: str = "incident-rescue-progress-v1"
    STATE_DIR: str = ".n7_runbook"                     # Used by the file backend
    DATABASE_URL: str = "sqlite:///./n7_runbook.db"    # Used by the sql backend

    # Step catalog — bundled AWS incident rescue runbook unless overridden
    CATALOG_PATH: Optional[str] = None

    # Audit exports
    EXPORT_DIR: str = "exports"


settings = Settings()
