# src/generator/models.py
# Domain records for the synthetic population, its sessions and the generated events,
# plus the immutable run configuration.


###### IMPORT TOOLS ######
# global imports
from uuid import UUID
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.dataclasses import dataclass

# local imports
from src.errors import ConfigurationError


######## POPULATION RECORDS ########
@dataclass(frozen=True)
class User:
    id: UUID
    country_code: str
    activity_multiplier: float


@dataclass(frozen=True)
class Session:
    id: UUID
    user_id: UUID
    started_at: datetime
    device_type: str
    browser: str
    country_code: str
    city: str
    events_in_session: int


######## EVENT RECORD ########
@dataclass(frozen=True)
class Event:
    event_time: datetime
    user_id: UUID
    session_id: UUID
    event_type: str
    properties: Dict[str, Any]
    page_url: Optional[str]
    referrer: Optional[str]
    device_type: str
    browser: str
    os: str
    country_code: str
    city: str


######## RUN CONFIGURATION ########
class GeneratorConfig(BaseModel):
    """Immutable inputs of one load run."""
    model_config = ConfigDict(frozen=True)

    total_events: int = Field(..., gt=0, description="Events to generate")
    batch_size: int = Field(50_000, gt=0, description="Events per bulk transfer")
    unique_users: int = Field(10_000, gt=0, description="Distinct synthetic users")
    start_date: datetime = Field(..., description="Inclusive start of the timestamp window")
    end_date: datetime = Field(..., description="Exclusive end of the timestamp window")
    heavy_user_fraction: float = Field(0.2, gt=0, lt=1, description="Share of users with elevated activity")
    heavy_user_multiplier: float = Field(4.0, gt=1, description="Activity scaling for heavy users")
    seed: Optional[int] = Field(None, description="Seed for reproducible runs")
    sessions_per_user: int = Field(5, gt=0)
    session_window_minutes: int = Field(30, gt=0)
    business_hours_start: int = Field(9, ge=0, le=23)
    business_hours_end: int = Field(17, ge=0, le=23)
    off_hours_keep_probability: float = Field(0.33, gt=0, le=1)
    max_resamples: int = Field(10, ge=0)
    referrer_drop_probability: float = Field(0.3, ge=0, le=1)
    timezone: str = "UTC"

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive datetimes are taken as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{v}'") from e
        return v

    @model_validator(mode="after")
    def check_windows(self):
        if self.start_date >= self.end_date:
            raise ValueError("start_date must be before end_date")
        if self.business_hours_start > self.business_hours_end:
            raise ValueError("business_hours_start must not be after business_hours_end")
        return self


def build_config(**kwargs: Any) -> GeneratorConfig:
    """Validate run parameters, reporting any problem as a ConfigurationError."""
    try:
        return GeneratorConfig(**kwargs)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid run configuration: {problems}") from e


def config_from_settings(settings: Any, now: Optional[datetime] = None, **overrides: Any) -> GeneratorConfig:
    """Build a GeneratorConfig from Settings, letting CLI values override them."""
    end_date = now or datetime.now(timezone.utc)
    values: Dict[str, Any] = {
        "total_events": settings.TOTAL_EVENTS,
        "batch_size": settings.BATCH_SIZE,
        "unique_users": settings.UNIQUE_USERS,
        "start_date": end_date - timedelta(days=settings.LOOKBACK_DAYS),
        "end_date": end_date,
        "heavy_user_fraction": settings.HEAVY_USER_FRACTION,
        "heavy_user_multiplier": settings.HEAVY_USER_MULTIPLIER,
        "seed": settings.RANDOM_SEED,
        "sessions_per_user": settings.SESSIONS_PER_USER,
        "session_window_minutes": settings.SESSION_WINDOW_MINUTES,
        "business_hours_start": settings.BUSINESS_HOURS_START,
        "business_hours_end": settings.BUSINESS_HOURS_END,
        "off_hours_keep_probability": settings.OFF_HOURS_KEEP_PROBABILITY,
        "max_resamples": settings.BUSINESS_HOURS_MAX_RESAMPLES,
        "referrer_drop_probability": settings.REFERRER_DROP_PROBABILITY,
        "timezone": settings.TIMEZONE,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return build_config(**values)
