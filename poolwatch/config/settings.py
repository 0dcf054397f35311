import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from poolwatch.utils.constants import (
    DEFAULT_BLOCK_HEADER_URL,
    DEFAULT_HISTORY_DAYS,
    DEFAULT_POLLING_INTERVAL,
    DEFAULT_UPDATE_INTERVAL,
)

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///poolwatch.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", REDIS_URL)
POOL_CACHE_KEY = os.getenv("POOL_CACHE_KEY", "poolwatch:pool_list")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@dataclass(frozen=True)
class CollectorSettings:
    pool_list: str
    polling_interval: float = DEFAULT_POLLING_INTERVAL
    update_interval: float = DEFAULT_UPDATE_INTERVAL
    history_days: float = DEFAULT_HISTORY_DAYS
    daemon_rpc_url: Optional[str] = None
    block_header_url: str = DEFAULT_BLOCK_HEADER_URL
    database_url: str = DATABASE_URL

    def __post_init__(self):
        if not self.pool_list:
            raise ValueError("Must supply url to pool list")
        if self.polling_interval <= 0 or self.update_interval <= 0:
            raise ValueError("Intervals must be positive")
        if self.history_days < 0:
            raise ValueError("historyDays cannot be negative")

    @classmethod
    def from_env(cls, **overrides) -> "CollectorSettings":
        """Build settings from the environment; non-None overrides win."""
        values = dict(
            pool_list=os.getenv("POOL_LIST_URL", ""),
            polling_interval=_env_float("POLLING_INTERVAL", DEFAULT_POLLING_INTERVAL),
            update_interval=_env_float("UPDATE_INTERVAL", DEFAULT_UPDATE_INTERVAL),
            history_days=_env_float("HISTORY_DAYS", DEFAULT_HISTORY_DAYS),
            daemon_rpc_url=os.getenv("DAEMON_RPC_URL") or None,
            block_header_url=os.getenv("BLOCK_HEADER_URL", DEFAULT_BLOCK_HEADER_URL),
            database_url=os.getenv("DATABASE_URL", DATABASE_URL),
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

