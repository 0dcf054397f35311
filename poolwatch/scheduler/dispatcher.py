"""
Celery-side wrappers around the collector ticks.

Each task builds a short-lived Collector whose pool-list cache lives in
Redis, runs exactly one tick and exits. A Redlock lock per task keeps a
slow tick from overlapping the next one across workers.
"""
import asyncio
import logging
from functools import lru_cache

from celery import shared_task
from redis import Redis
from redlock import Redlock

from poolwatch.config.settings import POOL_CACHE_KEY, REDIS_URL, CollectorSettings
from poolwatch.scheduler.cache import RedisPoolCache
from poolwatch.scheduler.collector import Collector
from poolwatch.storage.db import make_engine, make_session_factory
from poolwatch.storage.persistence import SqlPersistence

log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _redis() -> Redis:
    return Redis.from_url(REDIS_URL)


@lru_cache(maxsize=1)
def _locker() -> Redlock:
    return Redlock([_redis()])


@lru_cache(maxsize=1)
def _persistence(database_url: str) -> SqlPersistence:
    return SqlPersistence(make_session_factory(make_engine(database_url)))


async def _run_tick(tick_name: str) -> None:
    settings = CollectorSettings.from_env()
    collector = Collector(
        settings,
        _persistence(settings.database_url),
        cache=RedisPoolCache(_redis(), POOL_CACHE_KEY),
    )
    try:
        await getattr(collector, tick_name)()
    finally:
        await collector.close()


def run_locked(tick_name: str, ttl_seconds: float) -> bool:
    lock = _locker().lock(f"poolwatch:{tick_name}", int(ttl_seconds * 1000))
    if not lock:
        log.info(f"🔒 {tick_name} already running elsewhere; skipping.")
        return False
    try:
        asyncio.run(_run_tick(tick_name))
    finally:
        _locker().unlock(lock)
    return True


@shared_task(name="refresh_pool_list", queue="collector")
def refresh_pool_list() -> bool:
    return run_locked("refresh_list", CollectorSettings.from_env().update_interval)


@shared_task(name="poll_pool_status", queue="collector")
def poll_pool_status() -> bool:
    return run_locked("poll_status", CollectorSettings.from_env().polling_interval)


@shared_task(name="poll_pool_blocks", queue="collector")
def poll_pool_blocks() -> bool:
    return run_locked("poll_blocks", CollectorSettings.from_env().polling_interval)
