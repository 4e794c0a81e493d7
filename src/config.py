# src/config.py
# Configuration settings for the event load generator using Pydantic BaseSettings.


###### IMPORT TOOLS ######
# global imports
import os
import pathlib as pl
from functools import lru_cache
from pydantic import field_validator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

# local imports
from src.errors import ConfigurationError


###### BASEDIR ######
PROJECT_ROOT = pl.Path(__file__).resolve().parent.parent
BASE_DIR = str(PROJECT_ROOT)


###### SETTINGS ######
class Settings(BaseSettings):
    """Load generator configuration settings."""
    # app
    APP_ENV: str = Field("dev", pattern="^(dev|prod|test)$")
    # debug
    DEBUG: bool = False
    LOG_DIR: str = os.path.join(BASE_DIR, "src", "logs")
    LOG_FILE: str = os.path.join(BASE_DIR, "src", "logs", "app.log")
    # database
    POSTGRES_DB: str = "analytics"
    POSTGRES_USER: str = "analytics_user"
    POSTGRES_PASSWORD: str = "dev_password_123"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    EVENTS_DB_URL: str = ""
    EVENTS_TABLE: str = "events"
    # timezone used to decide business hours
    TIMEZONE: str = "UTC"
    # run
    TOTAL_EVENTS: int = 1_000_000
    BATCH_SIZE: int = 50_000
    UNIQUE_USERS: int = 10_000
    LOOKBACK_DAYS: int = 182
    HEAVY_USER_FRACTION: float = 0.2
    HEAVY_USER_MULTIPLIER: float = 4.0
    RANDOM_SEED: int | None = None
    RUN_TIMEOUT_SEC: float | None = None
    CONFIRM_THRESHOLD: int = 10_000_000
    # distribution tuning
    SESSIONS_PER_USER: int = 5
    SESSION_WINDOW_MINUTES: int = 30
    BUSINESS_HOURS_START: int = 9
    BUSINESS_HOURS_END: int = 17
    OFF_HOURS_KEEP_PROBABILITY: float = 0.33
    BUSINESS_HOURS_MAX_RESAMPLES: int = 10
    REFERRER_DROP_PROBABILITY: float = 0.3
    # progress
    PROGRESS_INTERVAL_SEC: float = 1.0
    # metrics
    METRICS_ENABLED: bool = False
    METRICS_HOST: str = "0.0.0.0"
    METRICS_PORT: str = "8003"


    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("EVENTS_DB_URL", mode="before")
    @classmethod
    def parse_events_db_url(cls, v):
        """Normalize the database URL so it always targets the asyncpg driver."""
        if v is None:
            return ""
        if not isinstance(v, str):
            raise TypeError("EVENTS_DB_URL must be a string")
        return to_asyncpg_url(v.strip())

    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL, built from POSTGRES_* when EVENTS_DB_URL is empty."""
        if self.EVENTS_DB_URL:
            return self.EVENTS_DB_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


###### URL HELPERS ######
def to_asyncpg_url(url: str) -> str:
    """Convert postgres URLs and key=value connection strings to a postgresql+asyncpg URL."""
    if not url:
        return ""
    if "://" not in url and "=" in url:
        url = _dsn_to_url(url)
    for prefix in ("postgresql+psycopg2://", "postgresql+psycopg://", "postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


def check_database_url(url: str) -> str:
    """Normalize a connection target and reject anything asyncpg cannot use."""
    normalized = to_asyncpg_url(url)
    try:
        parsed = make_url(normalized)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid connection target: {e}") from e
    if parsed.drivername != "postgresql+asyncpg":
        raise ConfigurationError(f"Unsupported database driver '{parsed.drivername}', expected PostgreSQL")
    return normalized

def _dsn_to_url(dsn: str) -> str:
    """Turn 'Host=...;Port=...;Database=...;Username=...;Password=...' into a URL."""
    parts = {}
    for chunk in dsn.replace(";", " ").split():
        if "=" not in chunk:
            continue
        key, value = chunk.split("=", 1)
        parts[key.strip().lower()] = value.strip()
    host = parts.get("host", "localhost")
    port = parts.get("port", "5432")
    database = parts.get("database") or parts.get("dbname", "")
    user = parts.get("username") or parts.get("user", "")
    password = parts.get("password", "")
    credentials = f"{user}:{password}@" if password else (f"{user}@" if user else "")
    return f"postgresql://{credentials}{host}:{port}/{database}"


# Create settings instance
@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    env = os.getenv("APP_ENV", "dev")
    env_file = PROJECT_ROOT / f".env.{env}"
    return Settings(_env_file=env_file)
