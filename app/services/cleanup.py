"""
Package Eviction Task

Periodically drops packages older than the configured age from the store.
Started and stopped by the application lifecycle hooks in ``app.main``.
"""

import asyncio
import logging
from datetime import timedelta
from typing import List, Optional

from ..repositories.package_store import PackageStore

logger = logging.getLogger(__name__)


class PackageEvictionTask:
    """Runs ``PackageStore.evict_older_than`` on a fixed interval"""

    def __init__(self, store: PackageStore, max_age: timedelta, interval: float):
        self.store = store
        self.max_age = max_age
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> List[str]:
        """Run one sweep. Failures are logged, never raised."""
        try:
            evicted = self.store.evict_older_than(self.max_age)
        except Exception as e:
            logger.error("Package eviction sweep failed: %s", e, exc_info=True)
            return []
        if evicted:
            logger.info("Evicted %d expired package(s)", len(evicted))
        return evicted

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        logger.info(
            "Starting package eviction every %ss (max age %s)",
            self.interval,
            self.max_age,
        )
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Package eviction stopped")
