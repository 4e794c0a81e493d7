# src/generator/data_generator.py
# Builds population, sessions and synthesizer once for a run.


###### IMPORT TOOLS ######
# global imports
import random
import logging
from typing import List, Tuple

# local imports
from src.generator.models import Event, GeneratorConfig, Session, User
from src.generator.payloads import TextPools
from src.generator.population import build_population
from src.generator.sessions import build_sessions
from src.generator.synthesizer import EventSynthesizer


###### LOGGER ######
logger = logging.getLogger("app.generator.data_generator")


###### DATA GENERATOR ######
class DataGenerator:
    """Population and session arenas plus the synthesizer reading from them.

    Everything is materialized in the constructor; afterwards the arenas are
    read-only and only the synthesizer's random source advances.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self.rng = random.Random(config.seed)
        self.users: Tuple[User, ...] = build_population(
            config.unique_users,
            config.heavy_user_fraction,
            config.heavy_user_multiplier,
            self.rng,
        )
        self.sessions: Tuple[Session, ...] = build_sessions(
            self.users,
            config.start_date,
            config.end_date,
            self.rng,
            sessions_per_user=config.sessions_per_user,
        )
        self.synthesizer = EventSynthesizer(
            self.sessions,
            config,
            self.rng,
            pools=TextPools.from_faker(seed=config.seed),
        )
        logger.info(
            "Data generator ready: %d users, %d sessions, seed=%s",
            len(self.users), len(self.sessions), config.seed,
        )

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "DataGenerator":
        return cls(config)

    @property
    def heavy_user_count(self) -> int:
        return sum(1 for u in self.users if u.activity_multiplier > 1.0)

    def generate_batch(self, count: int) -> List[Event]:
        return self.synthesizer.generate_batch(count)
