import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

import httpx

from poolwatch.config.settings import CollectorSettings
from poolwatch.scheduler.cache import PoolListCache
from poolwatch.scheduler.events import CollectorObserver, LoggingObserver
from poolwatch.scheduler.periodic import PeriodicTask
from poolwatch.sources.adapters.base import AdapterContext
from poolwatch.sources.adapters.registry import AdapterRegistry
from poolwatch.sources.chain.block_resolver import BlockHeightResolver
from poolwatch.sources.chain.node_client import ChainNodeClient
from poolwatch.sources.pool_list import PoolListSource
from poolwatch.storage.persistence import PersistenceGateway
from poolwatch.utils.constants import BLOCKS_SNAPSHOT_LIMIT, SECONDS_PER_DAY
from poolwatch.utils.errors import CacheUnavailable, SourceUnavailable
from poolwatch.utils.types import Pool, PoolError

log = logging.getLogger(__name__)


class CollectorState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


def make_http_client() -> httpx.AsyncClient:
    # pool operators commonly run self-signed certificates
    return httpx.AsyncClient(verify=False, follow_redirects=True)


class Collector:
    """
    Keeps the pool-list cache fresh and polls every cached pool.

    Three periodic tasks:
      • list refresh (update_interval) – replace the cache, save pools,
        prune history older than `history_days`
      • status poll  (polling_interval) – one polling snapshot per tick
      • blocks poll  (polling_interval) – recent blocks per pool

    Every tick works on the cache snapshot it took when it started.
    Failures are reported through the observers and never propagate.
    """

    def __init__(
        self,
        settings: CollectorSettings,
        persistence: PersistenceGateway,
        *,
        registry: Optional[AdapterRegistry] = None,
        list_source: Optional[PoolListSource] = None,
        cache: Optional[PoolListCache] = None,
        observers: Optional[Iterable[CollectorObserver]] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.persistence = persistence
        self.cache = cache if cache is not None else PoolListCache()
        self.observers = list(observers) if observers is not None else [LoggingObserver()]
        self.clock = clock

        self._owns_client = client is None and (registry is None or list_source is None)
        self.client = client if client is not None else (make_http_client() if self._owns_client else None)

        if registry is None:
            node = ChainNodeClient(settings.daemon_rpc_url, self.client)
            registry = AdapterRegistry(AdapterContext(
                client=self.client,
                resolver=BlockHeightResolver(node),
                block_header_url=settings.block_header_url,
            ))
        self.registry = registry
        self.list_source = list_source if list_source is not None else PoolListSource(self.client)

        self.state = CollectorState.STOPPED
        self.update_task = PeriodicTask("list-refresh", settings.update_interval, self.refresh_list)
        self.status_task = PeriodicTask("status", settings.polling_interval, self.poll_status)
        self.blocks_task = PeriodicTask("blocks", settings.polling_interval, self.poll_blocks)

    @property
    def tasks(self) -> tuple[PeriodicTask, ...]:
        return (self.update_task, self.status_task, self.blocks_task)

    # ── signals ─────────────────────────────────────────────────────────
    def _info(self, message: str) -> None:
        for observer in self.observers:
            observer.on_info(message)

    def _error(self, message: str) -> None:
        for observer in self.observers:
            observer.on_error(message)

    async def _update(self, pools: Sequence[Pool]) -> None:
        for observer in self.observers:
            observer.on_update(pools)
        await self._save_pools(pools)

    # ── lifecycle ───────────────────────────────────────────────────────
    def start(self) -> None:
        """Unpause all tasks and refresh the list right away."""
        for task in self.tasks:
            task.start()
        self.state = CollectorState.RUNNING
        self.update_task.tick()

    def stop(self) -> None:
        """Pause all tasks; runs already in flight complete."""
        for task in self.tasks:
            task.pause()
        self.state = CollectorState.STOPPED

    async def close(self) -> None:
        self.stop()
        for task in self.tasks:
            await task.stop()
            await task.wait_idle()
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    async def run_once(self) -> None:
        await self.refresh_list()
        await self.poll_status()
        await self.poll_blocks()

    # ── list refresh ────────────────────────────────────────────────────
    async def refresh_list(self) -> None:
        await asyncio.gather(self._update_list(), self._prune_history())

    async def _update_list(self) -> None:
        try:
            pools = await self.list_source.fetch_list(self.settings.pool_list)
        except SourceUnavailable as e:
            self._error(f"Could not update the public pool list: {e}")
            return
        try:
            self.cache.replace(pools)
        except CacheUnavailable as e:
            self._error(f"Could not cache the public pool list: {e}")
            return
        await self._update(pools)

    async def _save_pools(self, pools: Sequence[Pool]) -> None:
        try:
            await asyncio.to_thread(self.persistence.save_pools, pools)
        except Exception as e:
            self._error(f"Could not save {len(pools)} pools in the database: {e}")
            return
        self._info(f"Saved {len(pools)} pools in the database")

    def history_cutoff(self) -> int:
        return int(self.clock()) - int(self.settings.history_days * SECONDS_PER_DAY)

    async def _prune_history(self) -> None:
        cutoff = self.history_cutoff()
        try:
            await asyncio.to_thread(self.persistence.clean_polling_history, cutoff)
        except Exception as e:
            self._error(f"Could not clear old history from before {cutoff}: {e}")
            return
        self._info(f"Cleaned old polling history before {cutoff}")

    # ── polling ─────────────────────────────────────────────────────────
    def _collect(self, pools: Sequence[Pool], results: Sequence[object], what: str) -> list[Pool]:
        collected = []
        for pool, result in zip(pools, results):
            if isinstance(result, Pool):
                collected.append(result)
            elif isinstance(result, PoolError):
                log.info(f"Skipping {what} for {pool.api} ({pool.type}): {result.error}")
            elif isinstance(result, BaseException):
                self._error(f"Could not fetch {what} for {pool.api}: {result!r}")
        return collected

    def _snapshot(self, what: str) -> tuple[Pool, ...]:
        try:
            return self.cache.snapshot()
        except CacheUnavailable as e:
            self._error(f"Could not read the pool list for {what}: {e}")
            return ()

    async def poll_status(self) -> None:
        timestamp = int(self.clock())
        pools = self._snapshot("status")
        if not pools:
            return

        results = await asyncio.gather(
            *(self.registry.fetch_status(pool) for pool in pools), return_exceptions=True
        )
        polled = self._collect(pools, results, "status")
        if not polled:
            return

        try:
            await asyncio.to_thread(self.persistence.save_pools_polling, timestamp, polled)
        except Exception as e:
            self._error(f"Could not save polling event for {len(polled)} pools in the database: {e}")
            return
        self._info(f"Saved polling event for {len(polled)} pools in the database")

    async def poll_blocks(self) -> None:
        pools = self._snapshot("blocks")
        if not pools:
            return

        results = await asyncio.gather(
            *(self.registry.fetch_blocks(pool) for pool in pools), return_exceptions=True
        )
        found = self._collect(pools, results, "blocks")
        for pool in found:
            pool.blocks = pool.blocks[:BLOCKS_SNAPSHOT_LIMIT]
        if not found:
            return

        try:
            await asyncio.to_thread(self.persistence.save_pools_blocks, found)
        except Exception as e:
            self._error(f"Could not save blocks for {len(found)} pools in the database: {e}")
            return
        self._info(f"Saved blocks for {len(found)} pools in the database")
