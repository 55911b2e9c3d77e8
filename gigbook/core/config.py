"""
Configuration helpers for the Gigbook backend.

Exposes a Settings object that reads environment variables (database URL,
allowed origin, listen port, logging) so that repositories and routers do not
fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    allowed_origin: str
    port: int
    default_owner: str
    db_connect_timeout: float
    log_level: str
    log_file: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            parsed = float(value)
        except (TypeError, ValueError):
            return default
        return parsed if parsed > 0 else default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./gigbook.db").strip(),
        allowed_origin=os.getenv("ALLOWED_ORIGIN", "http://localhost:5173").rstrip("/"),
        port=_int(os.getenv("PORT", "4000"), 4000),
        default_owner=(os.getenv("DEFAULT_OWNER") or "user1").strip(),
        db_connect_timeout=_float(os.getenv("DB_CONNECT_TIMEOUT", "15"), 15.0),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_file=os.getenv("LOG_FILE", os.path.join("logs", "log.txt")),
    )
