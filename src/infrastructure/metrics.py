# src/infrastructure/metrics.py
# This module defines Prometheus metrics for monitoring a load run.


####### IMPORT TOOLS ######
# global imports
import time
from typing import Any, Callable
from aioprometheus import Counter, Histogram, Gauge


###### METRICS DEFINITIONS ######
events_loaded_total = Counter("events_loaded_total", "Events durably transferred to the sink")
batches_loaded_total = Counter("events_batches_total", "Batches acknowledged by the sink")
batch_duration_seconds = Histogram(
    "batch_duration_seconds",
    "Generation plus COPY time per batch in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)
events_per_second = Gauge("events_per_second", "Average load throughput since the run started")
events_eta_seconds = Gauge("events_eta_seconds", "Estimated seconds until the run completes")


###### BATCH METRICS ######
def record_batch(size: int, elapsed: float, labels: dict[str, Any] | None = None) -> None:
    """Record one acknowledged batch."""
    labels = labels or {}
    events_loaded_total.add(labels, size)
    batches_loaded_total.inc(labels)
    batch_duration_seconds.observe(labels, elapsed)


def record_progress(rate: float, eta: float | None) -> None:
    """Publish the reporter's latest rate and ETA."""
    events_per_second.set({}, rate)
    events_eta_seconds.set({}, eta if eta is not None else -1.0)


def time_block() -> Callable[[], float]:
    """ Simple timer for measuring elapsed time of a code block."""
    start = time.perf_counter()

    def _stop() -> float:
        return time.perf_counter() - start

    return _stop
