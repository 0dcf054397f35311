import itertools
import logging
from typing import Any, Optional

import httpx

from poolwatch.utils.constants import SLOW_TIMEOUT
from poolwatch.utils.errors import ChainNodeError

log = logging.getLogger(__name__)


class ChainNodeClient:
    """Minimal JSON-RPC client for the chain daemon (`/json_rpc`)."""

    def __init__(self, rpc_url: Optional[str], client: httpx.AsyncClient, timeout: float = SLOW_TIMEOUT):
        self.rpc_url = rpc_url
        self.client = client
        self.timeout = timeout
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self.rpc_url:
            raise ChainNodeError("No chain node configured")

        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await self.client.post(self.rpc_url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ChainNodeError(f"{method} failed: {e}") from e

        if not isinstance(body, dict):
            raise ChainNodeError(f"{method} returned a malformed response")
        if body.get("error"):
            raise ChainNodeError(f"{method} returned error: {body['error']}")
        result = body.get("result")
        if not isinstance(result, dict):
            raise ChainNodeError(f"{method} returned no result")
        return result

    async def block_header_by_height(self, height: int) -> dict[str, Any]:
        result = await self._call("getblockheaderbyheight", {"height": int(height)})
        header = result.get("block_header")
        if not isinstance(header, dict):
            raise ChainNodeError(f"No block header for height {height}")
        return header
