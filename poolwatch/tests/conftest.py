import pathlib
from typing import Any, Callable

import httpx
import pytest
from dotenv import load_dotenv
from redis.exceptions import ConnectionError as RedisConnectionError

from poolwatch.sources.adapters.base import AdapterContext
from poolwatch.sources.adapters.registry import AdapterRegistry
from poolwatch.sources.chain.block_resolver import BlockHeightResolver
from poolwatch.utils.errors import ChainNodeError
from poolwatch.utils.types import Pool

# Automatically load .env from project root
load_dotenv(dotenv_path=pathlib.Path(__file__).parent.parent.parent / ".env")


def routed_client(routes: dict[str, Any], seen: list | None = None) -> httpx.AsyncClient:
    """
    AsyncClient answering from `routes` (url -> JSON body, status code or
    exception). Unknown URLs fail like an unreachable host.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if seen is not None:
            seen.append((request.method, url, request.content))
        if url not in routes:
            raise httpx.ConnectError("unreachable", request=request)
        answer = routes[url]
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, int):
            return httpx.Response(answer, request=request)
        if isinstance(answer, str):
            return httpx.Response(200, text=answer, request=request)
        return httpx.Response(200, json=answer, request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def make_pool() -> Callable[..., Pool]:
    def _make(type: str = "forknote", api: str = "http://pool.test/api/", **fields) -> Pool:
        return Pool(id=fields.pop("id", f"{type}-id"), api=api, type=type, **fields)
    return _make


class FakeNode:
    """Chain node double: height -> hash, or an exception to raise."""

    def __init__(self, headers: dict[int, Any]):
        self.headers = headers
        self.calls: list[int] = []

    async def block_header_by_height(self, height: int) -> dict:
        self.calls.append(height)
        answer = self.headers.get(height)
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            raise ChainNodeError(f"no header for {height}")
        return {"hash": answer, "height": height}


@pytest.fixture
def make_registry() -> Callable[..., AdapterRegistry]:
    def _make(routes: dict[str, Any], node: Any = None, seen: list | None = None,
              block_header_url: str = "http://explorer.test/block/header/") -> AdapterRegistry:
        context = AdapterContext(
            client=routed_client(routes, seen),
            resolver=BlockHeightResolver(node),
            block_header_url=block_header_url,
        )
        return AdapterRegistry(context)
    return _make


@pytest.fixture
def client_for() -> Callable[..., httpx.AsyncClient]:
    return routed_client


@pytest.fixture
def make_node() -> Callable[..., FakeNode]:
    return FakeNode


class DictRedis:
    """In-memory stand-in for the two Redis calls the pool cache makes."""

    def __init__(self):
        self.data = {}
        self.down = False

    def _check(self):
        if self.down:
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value):
        self._check()
        self.data[key] = value.encode() if isinstance(value, str) else value


@pytest.fixture
def fake_redis():
    return DictRedis()
