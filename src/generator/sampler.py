# src/generator/sampler.py
# Weighted categorical sampling over (item, weight) tables.


###### IMPORT TOOLS ######
# global imports
import random
from bisect import bisect_left
from itertools import accumulate
from typing import Generic, Sequence, Tuple, TypeVar

# local imports
from src.errors import ConfigurationError


T = TypeVar("T")


###### WEIGHTED SAMPLER ######
class WeightedSampler(Generic[T]):
    """Draws one item with probability weight / sum(weights).

    Cumulative weights are computed once; each pick is a binary search over them.
    A draw landing past the last boundary through float rounding resolves to the
    last item.
    """

    def __init__(self, items: Sequence[Tuple[T, float]]):
        if not items:
            raise ConfigurationError("Weighted table must contain at least one item")
        for item, weight in items:
            if not weight > 0:
                raise ConfigurationError(f"Weight for {item!r} must be positive, got {weight!r}")
        self.items: Tuple[T, ...] = tuple(item for item, _ in items)
        self.cumulative: Tuple[float, ...] = tuple(accumulate(weight for _, weight in items))
        self.total: float = self.cumulative[-1]

    def __len__(self) -> int:
        return len(self.items)

    def pick(self, rng: random.Random) -> T:
        """Select one item using the given random source."""
        x = rng.random() * self.total
        index = bisect_left(self.cumulative, x)
        if index >= len(self.items):
            return self.items[-1]
        return self.items[index]
