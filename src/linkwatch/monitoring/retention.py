"""Periodic purge of aged history rows."""

import asyncio
import logging

from linkwatch.config import Settings
from linkwatch.history.repository import HistoryRepository

logger = logging.getLogger(__name__)


class DataRetentionService:
    def __init__(
        self,
        config: Settings,
        repository: HistoryRepository,
        initial_delay: float = 300.0,
    ) -> None:
        self.config = config
        self.repository = repository
        self.initial_delay = initial_delay
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        logger.info(
            "Starting data retention (raw=%dd, alerts=%dd)",
            self.config.raw_data_retention_days,
            self.config.alert_retention_days,
        )
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def purge_once(self) -> int:
        removed = await asyncio.to_thread(
            self.repository.cleanup_old_data,
            self.config.raw_data_retention_days,
            self.config.alert_retention_days,
        )
        logger.info("Data retention cleanup complete (%d rows removed)", removed)
        return removed

    async def _loop(self) -> None:
        await asyncio.sleep(self.initial_delay)
        while True:
            try:
                await self.purge_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Error during data retention cleanup")
            await asyncio.sleep(self.config.retention_interval_seconds)
