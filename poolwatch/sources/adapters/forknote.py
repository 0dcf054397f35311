from typing import Any

from poolwatch.sources.adapters.base import PoolAdapter, PoolType, section
from poolwatch.utils.constants import FORKNOTE_BLOCKS_LIMIT
from poolwatch.utils.sanitize import to_float, to_int, to_timestamp
from poolwatch.utils.types import Block, Pool


def donation_total(donation: Any) -> float:
    """`config.donation` is usually {address: percent}; a bare number also occurs."""
    if isinstance(donation, dict):
        return sum(to_float(v) for v in donation.values())
    return to_float(donation)


def parse_block_members(raw: Any, limit: int) -> list[Block]:
    """
    `pool.blocks` comes from a redis sorted set read with scores:
    [member, height, member, height, ...], member = "hash:ts:diff:...".
    """
    blocks = []
    if not isinstance(raw, list):
        return blocks
    for member, height in zip(raw[0::2], raw[1::2]):
        height = to_int(height, -1)
        if height < 0:
            continue
        block_hash = str(member).split(":", 1)[0] or None
        blocks.append(Block(height=height, hash=block_hash))
        if len(blocks) >= limit:
            break
    return blocks


class ForknoteAdapter(PoolAdapter):
    pool_type = PoolType.FORKNOTE
    resolve_hashes = True

    async def collect_status(self, pool: Pool) -> None:
        response = await self.fetch_json(self.endpoint(pool, "stats"))
        if not response or not isinstance(response, dict):
            return
        stats = section(response, "pool")
        network = section(response, "network")
        config = section(response, "config")

        pool.height = to_int(network.get("height"))
        pool.hashrate = to_int(stats.get("hashrate")) + to_int(stats.get("soloHashrate"))
        pool.miners = to_int(stats.get("miners")) + to_int(stats.get("soloMiners"))
        pool.fee = to_float(config.get("fee")) + donation_total(config.get("donation"))
        pool.min_payout = to_int(config.get("minPaymentThreshold"))
        pool.last_block = to_timestamp(stats.get("lastBlockFound"), divisor=1000)
        pool.donation = 0
        pool.status = 1

    async def collect_blocks(self, pool: Pool) -> list[Block]:
        response = await self.fetch_json(self.endpoint(pool, "stats"))
        return parse_block_members(section(response, "pool").get("blocks"), FORKNOTE_BLOCKS_LIMIT)
