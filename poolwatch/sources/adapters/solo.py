import asyncio
import logging
from typing import Optional

from poolwatch.sources.adapters.base import PoolAdapter, PoolType
from poolwatch.utils.constants import SLOW_TIMEOUT
from poolwatch.utils.errors import AdapterFetchFailure
from poolwatch.utils.sanitize import to_float, to_int
from poolwatch.utils.types import Block, Pool

log = logging.getLogger(__name__)


class SoloAdapter(PoolAdapter):
    """`stats` maps 1:1 onto the pool schema; block heights come from a lookup by hash."""
    pool_type = PoolType.SOLO
    timeout = SLOW_TIMEOUT

    async def collect_status(self, pool: Pool) -> None:
        stats = await self.fetch_json(self.endpoint(pool, "stats"))
        if not stats or not isinstance(stats, dict):
            return

        pool.height = to_int(stats.get("height"))
        pool.hashrate = to_int(stats.get("hashrate"))
        pool.miners = to_int(stats.get("miners"))
        pool.fee = to_float(stats.get("fee"))
        pool.min_payout = to_float(stats.get("minPayout"))
        pool.donation = to_float(stats.get("donation"))
        pool.status = 1
        pool.last_block = stats.get("lastBlock")

    async def _height_for(self, block_hash: str) -> Optional[Block]:
        url = self.context.block_header_url + block_hash
        try:
            header = await self.request_json(url)
        except AdapterFetchFailure as e:
            log.debug(f"Could not resolve block {block_hash}: {e}")
            return None
        if not isinstance(header, dict) or header.get("height") is None:
            return None
        return Block(height=to_int(header["height"]), hash=block_hash)

    async def collect_blocks(self, pool: Pool) -> list[Block]:
        listing = await self.fetch_json(self.endpoint(pool, "stats/blocks"), default=[])
        if not isinstance(listing, list):
            return []
        hashes = [entry["hash"] for entry in listing if isinstance(entry, dict) and entry.get("hash")]
        found = await asyncio.gather(*(self._height_for(h) for h in hashes))
        return [b for b in found if b is not None]
