import logging

from poolwatch.sources.adapters.base import AdapterContext, PoolAdapter, PoolType, blocks_from_entries, section
from poolwatch.utils.constants import SLOW_TIMEOUT, SNOWFLAKE_BLOCKS_LIMIT, SNOWFLAKE_CHAIN_ID
from poolwatch.utils.errors import AdapterFetchFailure
from poolwatch.utils.sanitize import to_int, to_timestamp
from poolwatch.utils.types import Block, Pool

log = logging.getLogger(__name__)


class SnowflakeAdapter(PoolAdapter):
    """
    Snowflake pools expose network stats, pool stats (broken down per
    port / chain id) and an altblocks listing. The two deployments only
    differ in the prefix glued in front of every path.
    """
    timeout = SLOW_TIMEOUT

    def __init__(self, context: AdapterContext, pool_type: PoolType, prefix: str = ""):
        super().__init__(context)
        self.pool_type = pool_type
        self.prefix = prefix

    def path(self, pool: Pool, path: str) -> str:
        return self.endpoint(pool, self.prefix + path)

    def altblocks_url(self, pool: Pool, limit: int) -> str:
        return self.path(pool, f"pool/coin_altblocks/{SNOWFLAKE_CHAIN_ID}?page=0&limit={limit}")

    async def collect_status(self, pool: Pool) -> None:
        pool.height = pool.hashrate = pool.miners = 0
        pool.fee = pool.min_payout = pool.donation = 0
        pool.status = pool.last_block = 0

        # the chain is sequential: the first failure leaves the rest at defaults
        try:
            netstats = await self.request_json(self.path(pool, "network/stats"))
            poolstats = await self.request_json(self.path(pool, "pool/stats"))

            network = section(netstats, SNOWFLAKE_CHAIN_ID)
            stats = section(poolstats, "pool_statistics")

            pool.height = to_int(network.get("height"))
            pool.hashrate = to_int(section(stats, "portHash").get(SNOWFLAKE_CHAIN_ID))
            pool.miners = to_int(section(stats, "portMinerCount").get(SNOWFLAKE_CHAIN_ID))
            pool.status = 1

            latest = await self.request_json(self.altblocks_url(pool, 1))
            block = latest[0] if isinstance(latest, list) and latest else {}
            pool.last_block = to_timestamp(block.get("ts") if isinstance(block, dict) else None, divisor=1000)
        except AdapterFetchFailure as e:
            log.debug(f"[{self.pool_type.value}] {e}")

    async def collect_blocks(self, pool: Pool) -> list[Block]:
        listing = await self.fetch_json(self.altblocks_url(pool, SNOWFLAKE_BLOCKS_LIMIT), default=[])
        return blocks_from_entries(listing, SNOWFLAKE_BLOCKS_LIMIT)
