from typing import Any
from urllib.parse import urlparse

from poolwatch.sources.adapters.base import PoolAdapter, PoolType, blocks_from_entries
from poolwatch.utils.constants import (
    CRYPTONOTE_SOCIAL_BLOCKS_URL,
    CRYPTONOTE_SOCIAL_COIN,
    CRYPTONOTE_SOCIAL_HOST,
    NODEJS_BLOCKS_LIMIT,
)
from poolwatch.utils.sanitize import to_float, to_int, to_timestamp
from poolwatch.utils.types import Block, Pool


def is_cryptonote_social(pool: Pool) -> bool:
    host = urlparse(pool.api).hostname or ""
    return host == CRYPTONOTE_SOCIAL_HOST or host.endswith("." + CRYPTONOTE_SOCIAL_HOST)


def _mined_blocks(body: Any) -> Any:
    if isinstance(body, dict):
        for key in ("Blocks", "blocks", "MinedBlocks"):
            if isinstance(body.get(key), list):
                return body[key]
        return []
    return body


class OtherAdapter(PoolAdapter):
    """Single flat endpoint: the pool's `api` URL itself."""
    pool_type = PoolType.OTHER

    async def collect_status(self, pool: Pool) -> None:
        response = await self.fetch_json(pool.api)
        if not response or not isinstance(response, dict):
            return

        pool.height = to_int(response.get("height"))
        pool.hashrate = to_int(response.get("hashRate"))
        pool.miners = to_int(response.get("miners"))
        pool.fee = to_float(response.get("fee"))
        # `minimum` is reported in whole coins, we store atomic units (2 decimals)
        pool.min_payout = to_int(to_float(response.get("minimum")) * 100)
        pool.last_block = to_timestamp(response.get("lastBlockFoundTime"))
        pool.donation = 0
        pool.status = 1

    async def collect_blocks(self, pool: Pool) -> list[Block]:
        if not is_cryptonote_social(pool):
            return []
        body = await self.fetch_json(
            CRYPTONOTE_SOCIAL_BLOCKS_URL,
            method="POST",
            payload={"Coin": CRYPTONOTE_SOCIAL_COIN},
            default=[],
        )
        return blocks_from_entries(
            _mined_blocks(body),
            NODEJS_BLOCKS_LIMIT,
            height_keys=("Height", "height"),
            hash_keys=("Hash", "hash"),
        )
