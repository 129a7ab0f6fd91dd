"""
Configuration management via environment variables.

Values are read from the process environment, with a project-root .env
file loaded first through python-dotenv. Everything is exposed through the
frozen Settings dataclass returned by get_settings().
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load .env file from project root before anything reads os.environ
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Console logging verbosity
        log_dir: Directory for daily log files (None = <project>/logs)
        database_url: SQLAlchemy URL of the authoritative store
        storage_persistent: Use the database backend instead of in-memory state
        activity_log_cap: Number of allocation log entries retained
        default_daily_limit: Quota given to newly created users
        default_max_per_request: Per-request cap given to newly created users
        admin_user_id: Id of the administrator seeded at startup
        admin_name: Display name of the seeded administrator
        admin_email: Email of the seeded administrator
        pool_view_max_age_seconds: How long a cached pool view stays fresh
        enable_audit_logging: Log every HTTP request
    """
    # Application settings
    app_name: str
    app_env: str
    log_level: str
    log_dir: Optional[str]

    # Storage settings
    database_url: str
    storage_persistent: bool

    # Allocation settings
    activity_log_cap: int
    default_daily_limit: int
    default_max_per_request: int
    pool_view_max_age_seconds: float

    # Seed account
    admin_user_id: str
    admin_name: str
    admin_email: str

    # Safety settings
    enable_audit_logging: bool

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


def _get_bool(key: str, default: str) -> bool:
    return _get_env(key, default).strip().lower() in ("1", "true", "yes", "on")


def _normalize_database_url(database_url: str) -> str:
    """Map legacy dialect prefixes to the driver names SQLAlchemy expects."""
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    if database_url.startswith("mysql://"):
        database_url = database_url.replace("mysql://", "mysql+pymysql://", 1)
    return database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once; call get_settings.cache_clear() after changing
    the environment (tests do this).

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    default_db = Path(__file__).parent.parent.parent / "datameq.db"
    database_url = _normalize_database_url(
        _get_env("DATABASE_URL", f"sqlite:///{default_db}")
    )

    daily_limit = int(_get_env("DEFAULT_DAILY_LIMIT", "100"))
    max_per_request = int(_get_env("DEFAULT_MAX_PER_REQUEST", "500"))
    if daily_limit < -1:
        raise ValueError("DEFAULT_DAILY_LIMIT must be -1 (unlimited) or a non-negative integer")
    if max_per_request < 1:
        raise ValueError("DEFAULT_MAX_PER_REQUEST must be a positive integer")

    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "DataMeq"),
        app_env=_get_env("APP_ENV", "development"),
        log_level=_get_env("LOG_LEVEL", "INFO"),
        log_dir=os.environ.get("LOG_DIR") or None,

        # Storage
        database_url=database_url,
        storage_persistent=_get_bool("STORAGE_PERSISTENT", "false"),

        # Allocation
        activity_log_cap=int(_get_env("ACTIVITY_LOG_CAP", "100")),
        default_daily_limit=daily_limit,
        default_max_per_request=max_per_request,
        pool_view_max_age_seconds=float(_get_env("POOL_VIEW_MAX_AGE_SECONDS", "0.5")),

        # Seed account
        admin_user_id=_get_env("ADMIN_USER_ID", "admin-1"),
        admin_name=_get_env("ADMIN_NAME", "Super Admin"),
        admin_email=_get_env("ADMIN_EMAIL", "admin@datameq.local"),

        # Safety
        enable_audit_logging=_get_bool("ENABLE_AUDIT_LOGGING", "true"),
    )
