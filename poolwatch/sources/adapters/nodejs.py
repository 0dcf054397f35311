import asyncio
import math
from typing import Any, Callable, NamedTuple

from poolwatch.sources.adapters.base import PoolAdapter, PoolType, blocks_from_entries, section
from poolwatch.utils.constants import NODEJS_BLOCKS_LIMIT
from poolwatch.utils.sanitize import to_float, to_int, to_timestamp
from poolwatch.utils.types import Block, Pool


class Shape(NamedTuple):
    """One recognizable response body: `matches` sniffs keys, `apply` merges it into the pool."""
    name: str
    matches: Callable[[dict], bool]
    apply: Callable[[Pool, dict], None]


def _hashrate(stats: dict) -> int:
    return to_int(stats.get("hashrate", stats.get("hashRate")))


def _later(current: float, candidate: float) -> float:
    if math.isnan(candidate):
        return current
    if math.isnan(current) or candidate > current:
        return candidate
    return current


# ── matchers, in priority order ─────────────────────────────────────────
def _apply_network(pool: Pool, body: dict) -> None:
    pool.height = to_int(body["height"])
    pool.status = 1


def _apply_pool_statistics(pool: Pool, body: dict) -> None:
    stats = section(body, "pool_statistics")
    collective = section(stats, "collective")

    if collective:
        pool.hashrate = _hashrate(collective)
        pool.miners = to_int(collective.get("miners"))
        pool.last_block = to_timestamp(section(collective, "lastFoundBlock").get("ts"))
    elif "hashrate" in stats or "hashRate" in stats:
        pool.hashrate = _hashrate(stats)
        pool.miners = to_int(stats.get("miners"))
        pool.last_block = to_timestamp(stats.get("lastBlockFoundTime"))

    solo = section(stats, "solo")
    if solo:
        pool.hashrate += _hashrate(solo)
        pool.miners += to_int(solo.get("miners"))
        solo_last = section(solo, "lastFoundBlock").get("ts", solo.get("lastBlockFoundTime"))
        pool.last_block = _later(pool.last_block, to_timestamp(solo_last))

    pool.status = 1


def _apply_legacy_config(pool: Pool, body: dict) -> None:
    pool.fee = to_float(body.get("pplns_fee"))
    pool.min_payout = to_float(body.get("min_wallet_payout"))
    pool.donation = to_float(body.get("dev_donation")) + to_float(body.get("pool_dev_donation"))


def _apply_nested_config(pool: Pool, body: dict) -> None:
    config = section(body, "config")
    pool.fee = to_float(config.get("fee", config.get("pplns_fee")))
    pool.min_payout = to_float(
        config.get("minPaymentThreshold", config.get("min_wallet_payout", config.get("minPayout")))
    )
    if "donation" in config:
        pool.donation = to_float(config.get("donation"))


def _apply_block_template(pool: Pool, body: dict) -> None:
    pool.height = to_int(section(body, "block_template").get("height"))
    pool.status = 1


SHAPES = (
    Shape("network", lambda b: b.get("height") is not None, _apply_network),
    Shape("pool_statistics", lambda b: "pool_statistics" in b, _apply_pool_statistics),
    Shape("legacy_config", lambda b: "min_wallet_payout" in b, _apply_legacy_config),
    Shape("nested_config", lambda b: isinstance(b.get("config"), dict), _apply_nested_config),
    Shape("block_template", lambda b: section(b, "block_template").get("height") is not None, _apply_block_template),
)


def merge_response(pool: Pool, body: Any) -> bool:
    """Apply the first shape matching `body`; False when nothing matched."""
    if not body or not isinstance(body, dict):
        return False
    for shape in SHAPES:
        if shape.matches(body):
            shape.apply(pool, body)
            return True
    return False


class NodeJsAdapter(PoolAdapter):
    """
    node.js pools answer on up to three endpoints, any of which may be
    missing. Each body is matched independently, so the stats endpoint
    and the config endpoint both contribute to the same record.
    """
    pool_type = PoolType.NODEJS
    resolve_hashes = True

    async def collect_status(self, pool: Pool) -> None:
        responses = await asyncio.gather(
            self.fetch_json(self.endpoint(pool, "pool/stats")),
            self.fetch_json(self.endpoint(pool, "network/stats")),
            self.fetch_json(self.endpoint(pool, "config")),
        )
        for response in responses:
            merge_response(pool, response)

    async def collect_blocks(self, pool: Pool) -> list[Block]:
        url = self.endpoint(pool, f"pool/blocks?page=0&limit={NODEJS_BLOCKS_LIMIT}")
        listing = await self.fetch_json(url, default=[])
        return blocks_from_entries(listing, NODEJS_BLOCKS_LIMIT)
