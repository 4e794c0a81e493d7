# src/pipeline/cli_utils.py
# Command-line driver: generate synthetic events and bulk-load them into PostgreSQL.


####### IMPORT TOOLS ########
# global imports
import sys
import signal
import asyncio
import logging
import argparse
import uvloop
from typing import Optional

# local imports
from src.config import check_database_url, get_settings
from src.data_base.bulk import TRANSPORT_ERRORS
from src.errors import ConfigurationError, TransportError
from src.generator.data_generator import DataGenerator
from src.generator.models import GeneratorConfig, config_from_settings
from src.infrastructure.resources import Resources
from src.pipeline.loader import BatchLoader, LoadResult
from src.pipeline.progress import ProgressReporter, format_duration
import src.logs.log_config  # noqa: F401


####### LOGGER ########
logger = logging.getLogger("app.pipeline.cli_utils")

EXIT_OK = 0
EXIT_TRANSPORT = 1
EXIT_CONFIG = 2


######## OUTPUT HELPERS ########
def print_configuration(config: GeneratorConfig, target: str) -> None:
    print("[INFO] Load generator configuration")
    print(f"       Target events: {config.total_events:,}")
    print(f"       Batch size:    {config.batch_size:,}")
    print(f"       Unique users:  {config.unique_users:,}")
    print(f"       Window:        {config.start_date.isoformat()} .. {config.end_date.isoformat()}")
    print(f"       Connection:    {target}")


def print_failure(total: int, transferred: int, elapsed: float, error: Exception) -> None:
    print(f"[ERROR] Load failed: {error}")
    print(f"        Requested: {total:,}, transferred: {transferred:,}, elapsed: {format_duration(elapsed)}")
    print(f"        Resume from offset {transferred:,} on the next run.")


def print_summary(result: LoadResult, stats, partitions) -> None:
    used = [p for p in partitions if p.row_count > 0]
    label = "[DONE] Load complete." if result.status == "completed" else "[WARN] Load cancelled at a batch boundary."
    print(label)
    print(f"       Events loaded:     {result.transferred:,} of {result.total:,}")
    print(f"       Total time:        {format_duration(result.elapsed)}")
    print(f"       Events/second:     {result.events_per_second:,.0f}")
    if stats is not None:
        print(f"       Database size:     {stats.database_size}")
        print(f"       Events table size: {stats.table_size}")
    print(f"       Partitions used:   {len(used)}")
    for partition in sorted(used, key=lambda p: p.row_count, reverse=True):
        print(f"         {partition.name:<32} {partition.row_count:>14,} {partition.size:>10}")


def _redact(url: str) -> str:
    _, sep, tail = url.rpartition("@")
    return tail if sep else url


######## CONFIRMATION ########
async def confirm_large_run(total: int, threshold: int, force: bool) -> bool:
    """Ask before very large loads unless --force was given."""
    if force or total < threshold:
        return True
    minutes = int(total / 500_000.0)
    answer = await asyncio.to_thread(
        input, f"About to load {total:,} events. This will take ~{minutes} minutes. Continue? [y/N] "
    )
    return answer.strip().lower() in ("y", "yes")


def _install_signal_handlers(loader: BatchLoader) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, loader.cancel)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handler for %s not supported here", sig)


######## RUN LOAD ########
async def run_load(
    config: GeneratorConfig,
    database_url: Optional[str] = None,
    force: bool = False,
    timeout: Optional[float] = None,
    resources: Optional[Resources] = None,
) -> int:
    settings = get_settings()
    try:
        target = check_database_url(database_url or settings.database_url)
    except ConfigurationError as e:
        logger.error("%s", e)
        print(f"[ERROR] {e}")
        return EXIT_CONFIG
    resources = resources or Resources(target)
    print_configuration(config, _redact(target))

    try:
        generator = await asyncio.to_thread(DataGenerator.from_config, config)
    except ConfigurationError as e:
        logger.error("%s", e)
        print(f"[ERROR] {e}")
        return EXIT_CONFIG
    print(
        f"[INFO] Data generator initialized: {len(generator.users):,} users "
        f"({generator.heavy_user_count:,} heavy), {len(generator.sessions):,} sessions"
    )

    await resources.start()
    try:
        inserter = resources.inserter
        try:
            baseline = await inserter.get_stats()
        except TRANSPORT_ERRORS as e:
            logger.error("Connection check failed: %s", e)
            print(f"[ERROR] Connection failed: {e}")
            return EXIT_TRANSPORT
        print(f"[INFO] Database connected. Current events: {baseline.total_events:,}, DB size: {baseline.database_size}")

        if not await confirm_large_run(config.total_events, settings.CONFIRM_THRESHOLD, force):
            print("[INFO] Cancelled")
            return EXIT_OK

        loader = BatchLoader(
            generator,
            inserter,
            total=config.total_events,
            batch_size=config.batch_size,
            timeout=timeout,
        )
        _install_signal_handlers(loader)
        reporter = ProgressReporter(loader.counters, interval=settings.PROGRESS_INTERVAL_SEC)
        reporter.start()
        failure = None
        try:
            result = await loader.run()
        except TransportError as e:
            failure = e
        finally:
            stats = await reporter.stop()
        if failure is not None:
            print_failure(config.total_events, failure.transferred, stats.elapsed, failure)
            return EXIT_TRANSPORT

        try:
            await inserter.analyze()
        except TRANSPORT_ERRORS as e:
            logger.warning("ANALYZE after load failed: %s", e)
            print(f"[WARN] Statistics refresh failed: {e}")

        try:
            final_stats = await inserter.get_stats()
            partitions = await inserter.get_partitions()
        except TRANSPORT_ERRORS as e:
            logger.warning("Final statistics unavailable: %s", e)
            final_stats, partitions = None, []
        print_summary(result, final_stats, partitions)
        return EXIT_OK
    finally:
        await resources.stop()


######## ARGUMENTS ########
def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="load_events",
        description="Generate realistic analytics events and bulk-load them with binary COPY.",
    )
    parser.add_argument("--rows", "-r", type=int, default=settings.TOTAL_EVENTS, help="Number of events to generate")
    parser.add_argument("--batch-size", "-b", type=int, default=settings.BATCH_SIZE, help="Events per bulk COPY")
    parser.add_argument("--users", "-u", type=int, default=settings.UNIQUE_USERS, help="Number of unique users")
    parser.add_argument("--connection", "-c", default=None, help="PostgreSQL URL or key=value connection string")
    parser.add_argument("--force", "-f", action="store_true", help="Skip confirmation prompts")
    parser.add_argument("--seed", type=int, default=settings.RANDOM_SEED, help="Random seed for reproducible data")
    parser.add_argument("--timeout", type=float, default=settings.RUN_TIMEOUT_SEC, help="Stop after this many seconds, at a batch boundary")
    return parser


######## MAIN FUNCTION FOR CLI ########
def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = config_from_settings(
            get_settings(),
            total_events=args.rows,
            batch_size=args.batch_size,
            unique_users=args.users,
            seed=args.seed,
        )
    except ConfigurationError as e:
        logger.error("%s", e)
        print(f"[ERROR] {e}")
        return EXIT_CONFIG

    return uvloop.run(run_load(config, database_url=args.connection, force=args.force, timeout=args.timeout))


######## ENTRY POINT ########
if __name__ == "__main__":
    sys.exit(main())
