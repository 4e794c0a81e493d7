# ./tests/tests_unit/test_pipeline/test_pipeline_loader.py


###### IMPORT TOOLS ######
# global imports
import asyncio
import threading
import pytest

# local imports
from src.errors import ConfigurationError, TransportError
from src.generator.data_generator import DataGenerator
from src.pipeline.loader import BatchLoader, LoadCounters


###### FAKES ######
class FakeSource:
    """Cheap event source: returns placeholders and records requested sizes."""
    def __init__(self):
        self.requests = []

    def generate_batch(self, count):
        self.requests.append(count)
        return [object()] * count


class FakeSink:
    """Acknowledges every batch, optionally failing on the n-th call."""
    def __init__(self, fail_on=None):
        self.sizes = []
        self.calls = 0
        self.fail_on = fail_on

    async def insert_events(self, events):
        self.calls += 1
        if self.fail_on is not None and self.calls == self.fail_on:
            raise TransportError("COPY failed: connection reset")
        self.sizes.append(len(events))
        return len(events)


###### MARK ALL TESTS AS ASYNCIO ######
pytestmark = pytest.mark.asyncio


###### TESTS ######
async def test_250k_in_five_batches():
    source, sink = FakeSource(), FakeSink()
    progression = []
    loader = BatchLoader(
        source, sink, total=250_000, batch_size=50_000,
        on_batch=lambda snap: progression.append(snap.transferred),
    )
    result = await loader.run()
    assert sink.sizes == [50_000] * 5
    assert progression == [50_000, 100_000, 150_000, 200_000, 250_000]
    assert result.status == "completed"
    assert result.transferred == 250_000
    assert result.batches == 5


async def test_cancellation_after_third_batch():
    source, sink = FakeSource(), FakeSink()
    loader = None

    def _on_batch(snap):
        if snap.batches == 3:
            loader.cancel()

    loader = BatchLoader(source, sink, total=250_000, batch_size=50_000, on_batch=_on_batch)
    result = await loader.run()
    assert result.status == "cancelled"
    assert result.transferred == 150_000
    assert sink.sizes == [50_000] * 3
    assert source.requests == [50_000] * 3


async def test_final_partial_batch_uses_same_path():
    source, sink = FakeSource(), FakeSink()
    result = await BatchLoader(source, sink, total=120, batch_size=50).run()
    assert sink.sizes == [50, 50, 20]
    assert source.requests == [50, 50, 20]
    assert result.transferred == 120


async def test_batch_smaller_than_total_single_batch():
    sink = FakeSink()
    await BatchLoader(FakeSource(), sink, total=7, batch_size=100).run()
    assert sink.sizes == [7]


async def test_transport_failure_reports_durable_prefix():
    source, sink = FakeSource(), FakeSink(fail_on=3)
    loader = BatchLoader(source, sink, total=500, batch_size=100)
    with pytest.raises(TransportError) as exc:
        await loader.run()
    assert exc.value.transferred == 200
    assert exc.value.total == 500
    assert sink.sizes == [100, 100]
    # no retry of the failed batch
    assert sink.calls == 3
    assert loader.counters.transferred == 200
    assert loader.counters.finished_at is not None


async def test_pre_cancelled_run_transfers_nothing():
    event = asyncio.Event()
    event.set()
    sink = FakeSink()
    result = await BatchLoader(FakeSource(), sink, total=100, batch_size=10, cancel_event=event).run()
    assert result.status == "cancelled"
    assert result.transferred == 0
    assert sink.calls == 0


async def test_timeout_stops_at_batch_boundary():
    sink = FakeSink()
    result = await BatchLoader(FakeSource(), sink, total=100, batch_size=10, timeout=0).run()
    assert result.status == "cancelled"
    assert sink.calls == 0


async def test_at_most_one_batch_in_flight():
    in_flight = 0
    peak = 0

    class SlowSink:
        async def insert_events(self, events):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return len(events)

    await BatchLoader(FakeSource(), SlowSink(), total=50, batch_size=10).run()
    assert peak == 1


async def test_same_seed_same_partitioning(config_factory):
    runs = []
    for _ in range(2):
        generator = DataGenerator.from_config(config_factory(seed=21))
        sink = FakeSink()
        result = await BatchLoader(generator, sink, total=230, batch_size=100).run()
        runs.append((sink.sizes, result.transferred))
    assert runs[0] == runs[1] == ([100, 100, 30], 230)


async def test_events_keep_generation_order(config_factory):
    generator = DataGenerator.from_config(config_factory(seed=5))
    expected = DataGenerator.from_config(config_factory(seed=5)).generate_batch(60)
    received = []

    class RecordingSink:
        async def insert_events(self, events):
            received.extend(events)
            return len(events)

    await BatchLoader(generator, RecordingSink(), total=60, batch_size=25).run()
    assert [e.session_id for e in received] == [e.session_id for e in expected]


@pytest.mark.parametrize("total, batch_size", [(0, 10), (10, 0), (-1, 5)])
async def test_invalid_sizes_raise(total, batch_size):
    with pytest.raises(ConfigurationError):
        BatchLoader(FakeSource(), FakeSink(), total=total, batch_size=batch_size)


async def test_snapshot_is_a_copy():
    counters = LoadCounters(total=10)
    snap = counters.snapshot()
    counters.transferred = 5
    assert snap.transferred == 0


async def test_snapshot_from_another_thread_is_consistent():
    counters = LoadCounters(total=20_000 * 10)
    mismatched = []

    def read():
        for _ in range(20_000):
            snap = counters.snapshot()
            if snap.transferred != snap.batches * 10:
                mismatched.append(snap)

    reader = threading.Thread(target=read)
    reader.start()
    for _ in range(20_000):
        counters.acknowledge(10)
    reader.join()
    assert mismatched == []
    assert (counters.transferred, counters.batches) == (200_000, 20_000)
