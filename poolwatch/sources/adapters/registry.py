import logging
from typing import Union

from poolwatch.sources.adapters.base import AdapterContext, PoolAdapter, PoolType
from poolwatch.sources.adapters.forknote import ForknoteAdapter
from poolwatch.sources.adapters.nodejs import NodeJsAdapter
from poolwatch.sources.adapters.other import OtherAdapter
from poolwatch.sources.adapters.snowflake import SnowflakeAdapter
from poolwatch.sources.adapters.solo import SoloAdapter
from poolwatch.utils.constants import UNKNOWN_POOL_TYPE
from poolwatch.utils.types import Pool, PoolError

log = logging.getLogger(__name__)

AdapterResult = Union[Pool, PoolError]


class UnknownPoolAdapter(PoolAdapter):
    """Default variant: answers with a sentinel and never touches the pool."""
    pool_type = PoolType.UNKNOWN

    async def fetch_status(self, pool: Pool) -> PoolError:
        return PoolError(pool=pool, error=UNKNOWN_POOL_TYPE)

    async def fetch_blocks(self, pool: Pool) -> PoolError:
        return PoolError(pool=pool, error=UNKNOWN_POOL_TYPE)


def build_adapters(context: AdapterContext) -> dict[PoolType, PoolAdapter]:
    adapters = {
        PoolType.FORKNOTE: ForknoteAdapter(context),
        PoolType.NODEJS: NodeJsAdapter(context),
        PoolType.OTHER: OtherAdapter(context),
        PoolType.SOLO: SoloAdapter(context),
        PoolType.SNOWFLAKE_1: SnowflakeAdapter(context, PoolType.SNOWFLAKE_1, prefix=""),
        PoolType.SNOWFLAKE_2: SnowflakeAdapter(context, PoolType.SNOWFLAKE_2, prefix="api"),
        PoolType.UNKNOWN: UnknownPoolAdapter(context),
    }
    missing = set(PoolType) - set(adapters)
    if missing:
        raise RuntimeError(f"No adapter registered for: {sorted(t.value for t in missing)}")
    return adapters


class AdapterRegistry:
    """Dispatches on `pool.type` to the adapter for that variant."""

    def __init__(self, context: AdapterContext):
        self.context = context
        self.adapters = build_adapters(context)

    def adapter_for(self, pool: Pool) -> PoolAdapter:
        return self.adapters[PoolType.parse(pool.type)]

    async def fetch_status(self, pool: Pool) -> AdapterResult:
        return await self.adapter_for(pool).fetch_status(pool)

    async def fetch_blocks(self, pool: Pool) -> AdapterResult:
        return await self.adapter_for(pool).fetch_blocks(pool)
