import json
import logging
from dataclasses import asdict

from redis import Redis
from redis.exceptions import RedisError

from poolwatch.utils.errors import CacheUnavailable
from poolwatch.utils.types import Block, Pool

log = logging.getLogger(__name__)


class PoolListCache:
    """
    Shared pool list. One writer (the list refresh) swaps the whole tuple;
    readers take a snapshot and keep it for the rest of their tick.
    """

    def __init__(self):
        self._pools: tuple[Pool, ...] = ()

    def snapshot(self) -> tuple[Pool, ...]:
        return self._pools

    def replace(self, pools) -> None:
        self._pools = tuple(pools)


def pool_to_json(pool: Pool) -> dict:
    data = asdict(pool)
    data["blocks"] = [list(b) for b in pool.blocks]
    return data


def pool_from_json(data: dict) -> Pool:
    data = dict(data)
    data["blocks"] = [Block(*b) for b in data.get("blocks", [])]
    return Pool(**data)


class RedisPoolCache(PoolListCache):
    """
    Pool list shared between Celery workers; replaced with a single SET.
    Redis failures surface as CacheUnavailable, and a failed SET leaves
    the previously stored list in place.
    """

    def __init__(self, redis: Redis, key: str):
        super().__init__()
        self.redis = redis
        self.key = key

    def snapshot(self) -> tuple[Pool, ...]:
        try:
            raw = self.redis.get(self.key)
        except RedisError as e:
            raise CacheUnavailable(f"Could not read {self.key}: {e}") from e
        if not raw:
            return ()
        return tuple(pool_from_json(item) for item in json.loads(raw))

    def replace(self, pools) -> None:
        pools = tuple(pools)
        try:
            self.redis.set(self.key, json.dumps([pool_to_json(p) for p in pools]))
        except RedisError as e:
            raise CacheUnavailable(f"Could not write {self.key}: {e}") from e
        log.info(f"Cached {len(pools)} pools under {self.key}")
