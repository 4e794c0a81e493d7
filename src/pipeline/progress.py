# src/pipeline/progress.py
# Read-only progress reporting derived from the loader's counters.


####### IMPORT TOOLS ########
# global imports
import time
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from tqdm import tqdm

# local imports
from src.infrastructure.metrics import record_progress
from src.pipeline.loader import CountersSnapshot, LoadCounters


####### LOGGER ########
logger = logging.getLogger("app.pipeline.progress")


######## LOAD STATS ########
@dataclass(frozen=True)
class LoadStats:
    total: int
    transferred: int
    elapsed: float
    events_per_second: float
    eta_seconds: Optional[float]

    @property
    def percent(self) -> float:
        return 100.0 * self.transferred / self.total if self.total else 0.0


def compute_load_stats(snapshot: CountersSnapshot, now: Optional[float] = None) -> LoadStats:
    """Rate and ETA at a point in time. ETA is None until something was transferred."""
    end = snapshot.finished_at if snapshot.finished_at is not None else (now if now is not None else time.monotonic())
    elapsed = max(end - snapshot.started_at, 1e-9)
    rate = snapshot.transferred / elapsed
    eta = (snapshot.total - snapshot.transferred) / rate if rate > 0 else None
    return LoadStats(
        total=snapshot.total,
        transferred=snapshot.transferred,
        elapsed=elapsed,
        events_per_second=rate,
        eta_seconds=eta,
    )


def format_duration(seconds: Optional[float]) -> str:
    """HH:MM:SS, or '--:--:--' when unknown."""
    if seconds is None:
        return "--:--:--"
    seconds = int(round(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


######## PROGRESS REPORTER ########
class ProgressReporter:
    """Samples the counters on a timer and renders a progress bar.

    Runs as its own task next to the loader; it only reads snapshots.
    """

    def __init__(self, counters: LoadCounters, interval: float = 1.0, show_bar: bool = True):
        self.counters = counters
        self.interval = interval
        self.show_bar = show_bar
        self.bar: Optional[tqdm] = None
        self.last: Optional[LoadStats] = None
        self._task: Optional[asyncio.Task] = None

    def sample(self) -> LoadStats:
        stats = compute_load_stats(self.counters.snapshot())
        record_progress(stats.events_per_second, stats.eta_seconds)
        if self.bar is not None:
            self.bar.n = stats.transferred
            self.bar.set_postfix_str(
                f"{stats.events_per_second:,.0f}/sec eta {format_duration(stats.eta_seconds)}", refresh=False
            )
            self.bar.refresh()
        if self.last is None or stats.transferred != self.last.transferred:
            logger.info(
                "Progress %d/%d (%.1f%%) at %.0f events/sec, eta %s",
                stats.transferred, stats.total, stats.percent,
                stats.events_per_second, format_duration(stats.eta_seconds),
            )
        self.last = stats
        return stats

    async def _run(self) -> None:
        while True:
            self.sample()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is not None:
            return
        if self.show_bar:
            self.bar = tqdm(total=self.counters.total, desc="Loading events", unit="ev", unit_scale=True)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> Optional[LoadStats]:
        """Cancel the timer, take a last sample and close the bar."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        stats = self.sample()
        if self.bar is not None:
            self.bar.close()
            self.bar = None
        return stats
