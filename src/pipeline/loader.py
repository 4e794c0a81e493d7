# src/pipeline/loader.py
# Batched transport of generated events into the bulk sink.


####### IMPORT TOOLS ########
# global imports
import time
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Sequence

# local imports
from src.errors import ConfigurationError, TransportError
from src.generator.models import Event
from src.infrastructure.metrics import record_batch, time_block


####### LOGGER ########
logger = logging.getLogger("app.pipeline.loader")


######## COLLABORATORS ########
class EventSource(Protocol):
    def generate_batch(self, count: int) -> List[Event]: ...


class BulkSink(Protocol):
    async def insert_events(self, events: Sequence[Event]) -> int: ...


######## COUNTERS ########
@dataclass(frozen=True)
class CountersSnapshot:
    total: int
    transferred: int
    batches: int
    started_at: float
    finished_at: Optional[float]


@dataclass
class LoadCounters:
    """Progress of one run. Only the loader writes; readers use snapshot().

    Writes and snapshots share a lock, so a reader on another thread never sees
    `transferred` and `batches` from different batches.
    """
    total: int
    transferred: int = 0
    batches: int = 0
    started_at: float = field(default_factory=time.monotonic)
    finished_at: Optional[float] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def acknowledge(self, size: int) -> None:
        with self._lock:
            self.transferred += size
            self.batches += 1

    def snapshot(self) -> CountersSnapshot:
        with self._lock:
            return CountersSnapshot(
                total=self.total,
                transferred=self.transferred,
                batches=self.batches,
                started_at=self.started_at,
                finished_at=self.finished_at,
            )


######## RESULT ########
@dataclass(frozen=True)
class LoadResult:
    status: str  # "completed" or "cancelled"
    total: int
    transferred: int
    batches: int
    elapsed: float

    @property
    def events_per_second(self) -> float:
        return self.transferred / self.elapsed if self.elapsed > 0 else 0.0


######## BATCH LOADER ########
class BatchLoader:
    """Moves `total` generated events into the sink, `batch_size` at a time.

    Each batch is generated, handed to the sink and awaited before the next one
    is requested, so at most one batch is in flight. Cancellation and the
    optional timeout are checked only between batches.
    """

    def __init__(
        self,
        source: EventSource,
        sink: BulkSink,
        total: int,
        batch_size: int,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
        on_batch: Optional[Callable[[CountersSnapshot], Any]] = None,
    ):
        if total <= 0:
            raise ConfigurationError(f"Total event count must be positive, got {total}")
        if batch_size <= 0:
            raise ConfigurationError(f"Batch size must be positive, got {batch_size}")
        self.source = source
        self.sink = sink
        self.batch_size = batch_size
        self.cancel_event = cancel_event or asyncio.Event()
        self.timeout = timeout
        self.on_batch = on_batch
        self.counters = LoadCounters(total=total)

    def cancel(self) -> None:
        """Stop after the batch currently in flight."""
        self.cancel_event.set()

    def _should_stop(self) -> bool:
        if self.cancel_event.is_set():
            return True
        if self.timeout is not None and time.monotonic() - self.counters.started_at >= self.timeout:
            logger.warning("Run timeout of %.1fs reached at %d events", self.timeout, self.counters.transferred)
            return True
        return False

    async def run(self) -> LoadResult:
        counters = self.counters
        counters.started_at = time.monotonic()
        status = "completed"
        logger.info("Loading %d events in batches of %d", counters.total, self.batch_size)
        try:
            while counters.transferred < counters.total:
                if self._should_stop():
                    status = "cancelled"
                    break
                count = min(self.batch_size, counters.total - counters.transferred)
                stop = time_block()
                batch = await asyncio.to_thread(self.source.generate_batch, count)
                try:
                    await self.sink.insert_events(batch)
                except TransportError as e:
                    e.transferred = counters.transferred
                    e.total = counters.total
                    logger.error(
                        "Batch %d failed after %d of %d events: %s",
                        counters.batches + 1, counters.transferred, counters.total, e,
                    )
                    raise
                counters.acknowledge(len(batch))
                record_batch(len(batch), stop())
                logger.debug("Batch %d acknowledged, %d/%d events", counters.batches, counters.transferred, counters.total)
                if self.on_batch is not None:
                    self.on_batch(counters.snapshot())
        finally:
            counters.finished_at = time.monotonic()

        elapsed = counters.finished_at - counters.started_at
        logger.info(
            "Load %s: %d/%d events in %d batches, %.2fs",
            status, counters.transferred, counters.total, counters.batches, elapsed,
        )
        return LoadResult(
            status=status,
            total=counters.total,
            transferred=counters.transferred,
            batches=counters.batches,
            elapsed=elapsed,
        )
