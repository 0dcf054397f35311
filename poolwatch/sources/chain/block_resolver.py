import asyncio
import logging
from typing import Iterable, Optional, Protocol

from poolwatch.utils.constants import BLOCK_HASH_LENGTH, NULL_BLOCK_HASH
from poolwatch.utils.errors import ChainNodeError
from poolwatch.utils.types import Block

log = logging.getLogger(__name__)


class BlockHeaderSource(Protocol):
    async def block_header_by_height(self, height: int) -> dict: ...


def has_full_hash(block: Block) -> bool:
    return isinstance(block.hash, str) and len(block.hash) == BLOCK_HASH_LENGTH


def order_blocks(blocks: Iterable[Block]) -> list[Block]:
    """Stable ascending sort by height, then reversed (highest first)."""
    return list(reversed(sorted(blocks, key=lambda b: b.height)))


class BlockHeightResolver:
    """Backfills missing block hashes from the chain node."""

    def __init__(self, node: Optional[BlockHeaderSource]):
        self.node = node

    async def _backfill(self, block: Block) -> Optional[Block]:
        if has_full_hash(block):
            return block
        if self.node is None:
            return None
        try:
            header = await self.node.block_header_by_height(block.height)
        except ChainNodeError as e:
            log.debug(f"Dropping block {block.height}: {e}")
            return None

        block_hash = header.get("hash")
        if not block_hash or block_hash == NULL_BLOCK_HASH:
            return None
        return block._replace(hash=block_hash)

    async def resolve(self, blocks: Iterable[Block]) -> list[Block]:
        results = await asyncio.gather(*(self._backfill(b) for b in blocks))
        return order_blocks(b for b in results if b is not None)
