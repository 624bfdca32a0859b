# burnnote/config.py

import os
from dataclasses import dataclass, field
from typing import Tuple

# =========================
# CONFIGURATION
# =========================

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _log_level_from_env() -> str:
    level = os.getenv("BURNNOTE_LOG_LEVEL", "INFO").strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(
            f"BURNNOTE_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {level!r}"
        )
    return level


def _database_url_from_env() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    db_user = os.getenv("DB_USER", "burnnote_user")
    db_pass = os.getenv("DB_PASS", "")
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")
    db_name = os.getenv("DB_NAME", "burnnote")
    return f"postgresql://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"


@dataclass(frozen=True)
class Settings:
    """
    Process configuration, built once at startup and passed to the
    message service and the app factory. Never mutated afterwards.
    """

    database_url: str = "sqlite://"
    delete_after_read: bool = False
    log_level: str = "INFO"
    rate_limit_enabled: bool = True
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    # Prefix used to build the access URL handed back on creation
    public_base_path: str = "/api/messages"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("BURNNOTE_CORS_ORIGINS", "*")
        return cls(
            database_url=_database_url_from_env(),
            delete_after_read=_env_flag("BURNNOTE_DELETE_AFTER_READ", False),
            log_level=_log_level_from_env(),
            rate_limit_enabled=_env_flag("BURNNOTE_RATE_LIMIT_ENABLED", True),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            public_base_path=os.getenv("BURNNOTE_PUBLIC_BASE_PATH", "/api/messages").rstrip("/"),
        )
