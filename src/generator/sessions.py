# src/generator/sessions.py
# Derives a pooled set of sessions from the population.


###### IMPORT TOOLS ######
# global imports
import math
import random
import logging
from datetime import datetime, timedelta
from typing import Sequence, Tuple

# local imports
from src.generator.catalog import BROWSERS, DEVICES, LOCATIONS, SESSION_EVENTS_MAX, SESSION_EVENTS_MIN
from src.generator.models import Session, User
from src.generator.population import random_uuid
from src.generator.sampler import WeightedSampler


###### LOGGER ######
logger = logging.getLogger("app.generator.sessions")


###### HELPERS ######
def random_datetime(start: datetime, end: datetime, rng: random.Random) -> datetime:
    """Uniform instant in [start, end)."""
    span = (end - start).total_seconds()
    return start + timedelta(seconds=rng.random() * span)


def session_count(base_rate: int, activity_multiplier: float) -> int:
    """Sessions owned by a user: floor(base * multiplier), zero allowed."""
    return max(0, math.floor(base_rate * activity_multiplier))


###### BUILD SESSIONS ######
def build_sessions(
    users: Sequence[User],
    start: datetime,
    end: datetime,
    rng: random.Random,
    sessions_per_user: int = 5,
) -> Tuple[Session, ...]:
    """Build every user's sessions and pool them into one flat tuple.

    Heavy users own proportionally more entries of the pool, so a uniform pick
    over it reproduces the population's activity skew.
    """
    devices = WeightedSampler(DEVICES)
    browsers = WeightedSampler(BROWSERS)
    sessions = []
    for user in users:
        cities = LOCATIONS[user.country_code][0]
        for _ in range(session_count(sessions_per_user, user.activity_multiplier)):
            sessions.append(
                Session(
                    id=random_uuid(rng),
                    user_id=user.id,
                    started_at=random_datetime(start, end, rng),
                    device_type=devices.pick(rng),
                    browser=browsers.pick(rng),
                    country_code=user.country_code,
                    city=rng.choice(cities),
                    events_in_session=rng.randint(SESSION_EVENTS_MIN, SESSION_EVENTS_MAX),
                )
            )
    logger.info("Built %d sessions for %d users", len(sessions), len(users))
    return tuple(sessions)
