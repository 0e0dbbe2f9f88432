from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Record Vault API"
    app_version: str = "0.1.0"
    app_env: str = "development"

    # Persistence backend
    database_url: str = "sqlite:///data/vault.db"
    database_echo: bool = False
    backend_timeout_seconds: float = 5.0
    # Raise BackendError from read operations instead of returning empty results
    strict_reads: bool = False

    # Snapshots
    backup_enabled: bool = True
    backup_dir: str = "backups"
    export_file: str = "export.txt"

    # Per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine, SQL queries
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_store: str = "WARNING"         # RecordStore / database lifecycle
    log_level_backup: str = "INFO"           # BackupSubscriber / snapshot files

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance: reads .env once."""
    return Settings()
