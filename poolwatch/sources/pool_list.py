import logging
from typing import Any

import httpx

from poolwatch.sources.identity import pool_id_for
from poolwatch.utils.constants import LIST_TIMEOUT
from poolwatch.utils.errors import SourceUnavailable
from poolwatch.utils.types import Pool

log = logging.getLogger(__name__)

# raw list keys consumed into Pool attributes; everything else lands in Pool.extra
_KNOWN_KEYS = {
    "name", "url", "api", "type", "miningAddress",
    "mergedMining", "mergedMiningIsParentChain",
}


def normalize_entry(entry: dict[str, Any]) -> Pool:
    """Raw pool-list entry -> zeroed Pool ready for the adapters."""
    return Pool(
        id=pool_id_for(entry),
        api=str(entry.get("api") or ""),
        type=str(entry.get("type") or "").lower(),
        name=str(entry.get("name") or ""),
        url=str(entry.get("url") or ""),
        mining_address=str(entry.get("miningAddress") or ""),
        merged_mining=1 if entry.get("mergedMining") else 0,
        merged_mining_is_parent_chain=1 if entry.get("mergedMiningIsParentChain") else 0,
        extra={k: v for k, v in entry.items() if k not in _KNOWN_KEYS},
    )


class PoolListSource:
    """Fetches the canonical pool directory."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = LIST_TIMEOUT):
        self.client = client
        self.timeout = timeout

    async def fetch_list(self, url: str) -> list[Pool]:
        try:
            resp = await self.client.get(url, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SourceUnavailable(f"Could not fetch pool list from {url}: {e}") from e

        if not isinstance(body, dict) or not isinstance(body.get("pools"), list):
            raise SourceUnavailable("Pool list not found")

        pools = [normalize_entry(entry) for entry in body["pools"] if isinstance(entry, dict)]
        log.info(f"Fetched {len(pools)} pools from {url}")
        return pools
