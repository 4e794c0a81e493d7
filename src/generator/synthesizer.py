# src/generator/synthesizer.py
# Produces realistic events by picking sessions from the pooled arena.


###### IMPORT TOOLS ######
# global imports
import random
import logging
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo
from typing import Iterator, List, Optional, Sequence

# local imports
from src.errors import ConfigurationError
from src.generator.catalog import EVENT_TYPES, OPERATING_SYSTEMS, UNKNOWN_OS
from src.generator.models import Event, GeneratorConfig, Session
from src.generator.payloads import TextPools, build_payload
from src.generator.sampler import WeightedSampler
from src.generator.sessions import random_datetime


###### LOGGER ######
logger = logging.getLogger("app.generator.synthesizer")


###### EVENT SYNTHESIZER ######
class EventSynthesizer:
    """Generates events on demand from a read-only session pool.

    Sessions are picked uniformly; heavy users own more of the pool, which is
    what skews activity towards them. Nothing here touches the network or the
    database, so it can run ahead of the transport stage.
    """

    def __init__(
        self,
        sessions: Sequence[Session],
        config: GeneratorConfig,
        rng: random.Random,
        pools: Optional[TextPools] = None,
    ):
        if not sessions:
            raise ConfigurationError("Session pool is empty; raise the population size or sessions per user")
        self.sessions = sessions
        self.config = config
        self.rng = rng
        self.pools = pools or TextPools.from_faker(seed=config.seed)
        self.tz: tzinfo = ZoneInfo(config.timezone)
        self.window = timedelta(minutes=config.session_window_minutes)
        self.event_types = WeightedSampler(EVENT_TYPES)
        self.operating_systems = {device: WeightedSampler(table) for device, table in OPERATING_SYSTEMS.items()}
        # resample loops that hit the cap and kept an off-hours candidate
        self.fallback_count = 0

    ###### TIMESTAMPS ######
    def is_business_hour(self, moment: datetime) -> bool:
        hour = moment.astimezone(self.tz).hour
        return self.config.business_hours_start <= hour <= self.config.business_hours_end

    def event_time(self, session: Session) -> datetime:
        """Session start plus jitter, biased towards business hours.

        An off-hours candidate is kept with probability `off_hours_keep_probability`,
        otherwise replaced by a fresh instant from the whole window. After
        `max_resamples` replacements the current candidate is accepted.
        """
        candidate = session.started_at + self.window * self.rng.random()
        resamples = 0
        while not self.is_business_hour(candidate):
            if self.rng.random() < self.config.off_hours_keep_probability:
                break
            if resamples >= self.config.max_resamples:
                self.fallback_count += 1
                break
            candidate = random_datetime(self.config.start_date, self.config.end_date, self.rng)
            resamples += 1
        return candidate

    ###### DEVICE CONTEXT ######
    def operating_system(self, device_type: str) -> str:
        sampler = self.operating_systems.get(device_type)
        if sampler is None:
            return UNKNOWN_OS
        return sampler.pick(self.rng)

    def referrer(self) -> Optional[str]:
        if self.rng.random() < self.config.referrer_drop_probability:
            return None
        return self.rng.choice(self.pools.referrers)

    ###### EVENTS ######
    def generate_event(self) -> Event:
        """Build one event tied to a randomly selected session."""
        rng = self.rng
        session = self.sessions[rng.randrange(len(self.sessions))]
        event_time = self.event_time(session)
        event_type = self.event_types.pick(rng)
        payload = build_payload(event_type, rng, self.pools)
        return Event(
            event_time=event_time,
            user_id=session.user_id,
            session_id=session.id,
            event_type=event_type,
            properties=payload.model_dump(),
            page_url=rng.choice(self.pools.page_urls),
            referrer=self.referrer(),
            device_type=session.device_type,
            browser=session.browser,
            os=self.operating_system(session.device_type),
            country_code=session.country_code,
            city=session.city,
        )

    def generate_batch(self, count: int) -> List[Event]:
        """Exactly `count` events, in generation order."""
        return [self.generate_event() for _ in range(count)]

    def stream(self) -> Iterator[Event]:
        """Endless event stream; every call starts a new iterator."""
        while True:
            yield self.generate_event()
