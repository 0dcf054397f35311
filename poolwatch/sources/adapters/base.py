import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

import httpx

from poolwatch.sources.chain.block_resolver import BlockHeightResolver, order_blocks
from poolwatch.utils.constants import DEFAULT_BLOCK_HEADER_URL, LEGACY_TIMEOUT
from poolwatch.utils.errors import AdapterFetchFailure
from poolwatch.utils.sanitize import round_percent, sanitize_last_block, to_int
from poolwatch.utils.types import Block, Pool

log = logging.getLogger(__name__)

# parse failures inside one adapter call; anything else is a real bug
PARSE_ERRORS = (LookupError, TypeError, ValueError, AttributeError)


class PoolType(str, Enum):
    FORKNOTE = "forknote"
    NODEJS = "node.js"
    OTHER = "other"
    SOLO = "solo"
    SNOWFLAKE_1 = "snowflake-1"
    SNOWFLAKE_2 = "snowflake-2"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PoolType":
        try:
            return cls(str(value or "").lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass
class AdapterContext:
    client: httpx.AsyncClient
    resolver: BlockHeightResolver
    block_header_url: str = DEFAULT_BLOCK_HEADER_URL


def section(body: Any, key: str) -> dict:
    """`body[key]` when it is an object, else an empty one."""
    if isinstance(body, dict) and isinstance(body.get(key), dict):
        return body[key]
    return {}


def finalize_status(pool: Pool) -> Pool:
    pool.last_block = sanitize_last_block(pool.last_block)
    pool.fee = round_percent(pool.fee)
    pool.donation = round_percent(pool.donation)
    return pool


class PoolAdapter:
    """
    Base for the per-type adapters.

    Subclasses implement `collect_status` (mutates the working copy in
    place) and `collect_blocks` (returns raw blocks). Every upstream
    request goes through `fetch_json`, which never raises: a failed
    sub-fetch yields an empty body and the fields it would have filled
    keep their zeroed defaults.
    """
    pool_type: PoolType = PoolType.UNKNOWN
    timeout: float = LEGACY_TIMEOUT
    resolve_hashes: bool = False

    def __init__(self, context: AdapterContext):
        self.context = context

    @property
    def client(self) -> httpx.AsyncClient:
        return self.context.client

    @staticmethod
    def endpoint(pool: Pool, path: str = "") -> str:
        base = pool.api if pool.api.endswith("/") else pool.api + "/"
        return base + path

    async def request_json(self, url: str, *, method: str = "GET", payload: Any = None) -> Any:
        try:
            resp = await self.client.request(method, url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise AdapterFetchFailure(url, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise AdapterFetchFailure(url, "invalid JSON") from e

    async def fetch_json(self, url: str, *, method: str = "GET", payload: Any = None, default: Any = None) -> Any:
        try:
            return await self.request_json(url, method=method, payload=payload)
        except AdapterFetchFailure as e:
            log.debug(f"[{self.pool_type.value}] {e}")
            return {} if default is None else default

    # ── status ──────────────────────────────────────────────────────────
    async def collect_status(self, pool: Pool) -> None:
        raise NotImplementedError

    async def fetch_status(self, pool: Pool) -> Pool:
        working = pool.fresh()
        try:
            await self.collect_status(working)
        except PARSE_ERRORS as e:
            log.warning(f"[{self.pool_type.value}] Malformed status from {pool.api}: {e!r}")
        return finalize_status(working)

    # ── blocks ──────────────────────────────────────────────────────────
    async def collect_blocks(self, pool: Pool) -> list[Block]:
        return []

    async def fetch_blocks(self, pool: Pool) -> Pool:
        working = pool.fresh()
        try:
            blocks = await self.collect_blocks(working)
        except PARSE_ERRORS as e:
            log.warning(f"[{self.pool_type.value}] Malformed block list from {pool.api}: {e!r}")
            blocks = []

        if self.resolve_hashes:
            working.blocks = await self.context.resolver.resolve(blocks)
        else:
            working.blocks = order_blocks(blocks)
        return working


def blocks_from_entries(entries: Iterable[Any], limit: int, height_keys=("height",), hash_keys=("hash",)) -> list[Block]:
    """Generic `[{height, hash}, ...]` listing -> Blocks (first `limit` entries)."""
    result = []
    if not isinstance(entries, list):
        return result
    for entry in entries[:limit]:
        if not isinstance(entry, dict):
            continue
        height = next((entry[k] for k in height_keys if entry.get(k) is not None), None)
        if height is None:
            continue
        block_hash = next((entry[k] for k in hash_keys if entry.get(k)), None)
        height = to_int(height, -1)
        if height < 0:
            continue
        result.append(Block(height=height, hash=block_hash))
    return result
