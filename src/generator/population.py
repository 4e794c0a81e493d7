# src/generator/population.py
# Builds the synthetic user population with an 80/20 activity skew.


###### IMPORT TOOLS ######
# global imports
import math
import uuid
import random
import logging
from typing import Tuple

# local imports
from src.errors import ConfigurationError
from src.generator.catalog import COUNTRIES
from src.generator.models import User
from src.generator.sampler import WeightedSampler


###### LOGGER ######
logger = logging.getLogger("app.generator.population")


###### HELPERS ######
def random_uuid(rng: random.Random) -> uuid.UUID:
    """Version-4 UUID drawn from the given random source, so seeded runs repeat."""
    return uuid.UUID(int=rng.getrandbits(128), version=4)


###### BUILD POPULATION ######
def build_population(
    size: int,
    heavy_fraction: float,
    heavy_multiplier: float,
    rng: random.Random,
) -> Tuple[User, ...]:
    '''Create exactly `size` users; the first floor(size * heavy_fraction) are heavy users.'''
    if size <= 0:
        raise ConfigurationError(f"Population size must be positive, got {size}")
    if not 0 < heavy_fraction < 1:
        raise ConfigurationError(f"Heavy user fraction must be in (0, 1), got {heavy_fraction}")
    if not heavy_multiplier > 1:
        raise ConfigurationError(f"Heavy user multiplier must be greater than 1, got {heavy_multiplier}")

    countries = WeightedSampler(COUNTRIES)
    heavy_count = math.floor(size * heavy_fraction)
    users = tuple(
        User(
            id=random_uuid(rng),
            country_code=countries.pick(rng),
            activity_multiplier=heavy_multiplier if i < heavy_count else 1.0,
        )
        for i in range(size)
    )
    logger.info("Built population of %d users (%d heavy, multiplier %.2f)", size, heavy_count, heavy_multiplier)
    return users
