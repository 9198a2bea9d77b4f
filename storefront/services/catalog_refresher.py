"""
Фоновое обновление снимка каталога.

Перезагружает кэш каталога с фиксированным интервалом как страховку
от пропущенных инвалидаций и изменений базы в обход админки.
"""

import asyncio
import logging
from typing import Optional

from storefront.services.catalog_cache import CatalogCache

logger = logging.getLogger(__name__)


class CatalogRefresher:
    """Периодическая перезагрузка кэша каталога в фоновом режиме."""

    def __init__(self, cache: CatalogCache, interval_seconds: float = 300):
        self.cache = cache
        self.interval_seconds = interval_seconds
        self.is_running = False
        self.ticks = 0
        self.skipped_ticks = 0
        self._background_task: Optional[asyncio.Task] = None

    async def start(self):
        """Запустить таймер обновления."""
        if self.is_running:
            return

        self.is_running = True
        self._background_task = asyncio.create_task(self._run())
        logger.info(f"Catalog refresher started, interval {self.interval_seconds}s")

    async def stop(self):
        """Остановить таймер обновления."""
        if not self.is_running:
            return

        self.is_running = False
        if self._background_task:
            self._background_task.cancel()
            try:
                await self._background_task
            except asyncio.CancelledError:
                pass
            self._background_task = None

        logger.info("Catalog refresher stopped")

    async def tick(self) -> bool:
        """
        Один запуск таймера.

        Перезагрузка выполняется в отдельном потоке. Если перезагрузка уже
        идет, запуск пропускается без постановки в очередь.

        Returns:
            bool: True, если новый снимок опубликован
        """
        self.ticks += 1
        if self.cache.is_reloading:
            self.skipped_ticks += 1
            logger.debug("Catalog reload in progress, skipping scheduled tick")
            return False

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.cache.reload, False)

    async def _run(self):
        """Основной цикл таймера."""
        while self.is_running:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Error in catalog refresher: {e}")
