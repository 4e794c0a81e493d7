# src/infrastructure/resources.py
# This module manages shared resources of a load run: database engine, bulk sink and metrics service.


###### IMPORT TOOLS ######
# global imports
import logging
from aioprometheus.service import Service
from sqlalchemy.ext.asyncio import AsyncEngine

# local imports
from src.config import get_settings
from src.data_base.bulk import BulkInserter
from src.data_base.db import make_engine
from src.infrastructure.metrics import record_progress


###### LOGGER ######
logger = logging.getLogger("app.infrastructure.resources")

###### RESOURCES ######
class Resources:
    """Owns the engine, the bulk inserter and the optional metrics endpoint."""
    def __init__(self, database_url: str | None = None):
        self.database_url = database_url
        self.engine: AsyncEngine | None = None
        self.inserter: BulkInserter | None = None
        self.metrics_service: Service | None = None
        self._started = False

    async def start(self):
        """Initialize resources if not already started."""
        if self._started:
            return
        settings = get_settings()
        self.engine = make_engine(self.database_url)
        self.inserter = BulkInserter(self.engine, table=settings.EVENTS_TABLE)
        if settings.METRICS_ENABLED:
            await self.start_metrics()
        record_progress(0.0, None)
        self._started = True
        logger.info("Resources started.")

    async def stop(self):
        """Clean up resources if they were started."""
        if not self._started:
            return
        if self.metrics_service:
            await self.metrics_service.stop()
            self.metrics_service = None
        if self.engine:
            await self.engine.dispose()
            self.engine = None
        self.inserter = None
        self._started = False
        logger.info("Resources stopped.")

    async def start_metrics(self):
        """Start the Prometheus metrics endpoint."""
        settings = get_settings()
        service = Service()
        await service.start(addr=settings.METRICS_HOST, port=int(settings.METRICS_PORT))
        self.metrics_service = service
        logger.info("Metrics service started on %s:%s", settings.METRICS_HOST, settings.METRICS_PORT)

    async def __aenter__(self) -> "Resources":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
