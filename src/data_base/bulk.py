# src/data_base/bulk.py
# This module writes event batches to PostgreSQL with binary COPY and reads load statistics.


###### IMPORT TOOLS ######
# global imports
import json
import logging
import asyncpg
from datetime import datetime, timezone
from typing import List, Sequence
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

# local imports
from src.data_base.models import COPY_COLUMNS
from src.errors import TransportError
from src.generator.models import Event


####### LOGGER ########
logger = logging.getLogger("app.data_base.bulk")

# failures of a COPY that abort the batch
TRANSPORT_ERRORS = (SQLAlchemyError, asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


######## STATS RECORDS ########
class DatabaseStats(BaseModel):
    total_events: int = 0
    database_size: str = ""
    table_size: str = ""


class PartitionInfo(BaseModel):
    name: str
    row_count: int
    size: str


######## QUERIES ########
STATS_QUERY = text("""
    SELECT
        COALESCE(SUM(n_live_tup), 0) AS total_events,
        pg_size_pretty(pg_database_size(current_database())) AS db_size,
        pg_size_pretty(COALESCE(pg_total_relation_size(to_regclass(CAST(:table AS text))), 0)) AS table_size
    FROM pg_stat_user_tables
    WHERE schemaname = 'public' AND (relname::text = CAST(:table AS text) OR relname::text LIKE CAST(:pattern AS text))
""")

PARTITIONS_QUERY = text("""
    SELECT
        c.relname AS partition_name,
        pg_stat_get_live_tuples(c.oid) AS row_count,
        pg_size_pretty(pg_total_relation_size(c.oid)) AS size
    FROM pg_class c
    JOIN pg_namespace n ON n.oid = c.relnamespace
    JOIN pg_inherits i ON i.inhrelid = c.oid
    JOIN pg_class p ON p.oid = i.inhparent
    WHERE p.relname::text = CAST(:table AS text)
    AND n.nspname = 'public'
    ORDER BY c.relname
""")


######## EVENT TO COPY RECORD ########
def to_record(event: Event, created_at: datetime) -> tuple:
    """Row tuple matching COPY_COLUMNS."""
    return (
        event.event_time,
        event.user_id,
        event.session_id,
        event.event_type,
        json.dumps(event.properties, separators=(",", ":")),
        event.page_url,
        event.referrer,
        event.device_type,
        event.browser,
        event.os,
        event.country_code,
        event.city,
        created_at,
    )


######## BULK INSERTER ########
class BulkInserter:
    """Bulk sink for events: one binary COPY per batch, inside one transaction."""

    def __init__(self, engine: AsyncEngine, table: str = "events", columns: Sequence[str] = COPY_COLUMNS):
        self.engine = engine
        self.table = table
        self.columns = tuple(columns)

    async def insert_events(self, events: Sequence[Event]) -> int:
        '''COPY a whole batch; either every row is committed or none is.'''
        if not events:
            return 0
        created_at = datetime.now(timezone.utc)
        records = [to_record(event, created_at) for event in events]
        try:
            async with self.engine.begin() as connection:
                raw = await connection.get_raw_connection()
                await raw.driver_connection.copy_records_to_table(
                    self.table,
                    records=records,
                    columns=self.columns,
                )
        except TRANSPORT_ERRORS as e:
            logger.error("COPY of %d events into %s failed: %s", len(records), self.table, e)
            raise TransportError(f"Bulk transfer of {len(records)} events failed: {e}") from e
        return len(records)

    async def get_stats(self) -> DatabaseStats:
        """Current durable event count and storage sizes."""
        async with self.engine.connect() as connection:
            result = await connection.execute(
                STATS_QUERY, {"table": self.table, "pattern": f"{self.table}_%"}
            )
            row = result.first()
        if row is None:
            return DatabaseStats()
        return DatabaseStats(total_events=int(row[0]), database_size=row[1], table_size=row[2])

    async def get_partitions(self) -> List[PartitionInfo]:
        """Partitions of the events table with their live row counts."""
        async with self.engine.connect() as connection:
            result = await connection.execute(PARTITIONS_QUERY, {"table": self.table})
            rows = result.fetchall()
        return [PartitionInfo(name=r[0], row_count=int(r[1]), size=r[2]) for r in rows]

    async def analyze(self) -> None:
        """Refresh planner statistics after a load."""
        async with self.engine.begin() as connection:
            await connection.execute(text(f'ANALYZE "{self.table}"'))
        logger.info("ANALYZE %s completed", self.table)
