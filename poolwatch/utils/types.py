from dataclasses import dataclass, field, replace
from typing import Any, NamedTuple, Optional


class Block(NamedTuple):
    height: int
    hash: Optional[str] = None


@dataclass
class Pool:
    """One tracked mining pool, as held in the pool-list cache."""
    id: str
    api: str
    type: str
    name: str = ""
    url: str = ""
    mining_address: str = ""
    merged_mining: int = 0
    merged_mining_is_parent_chain: int = 0

    height: int = 0
    hashrate: int = 0
    miners: int = 0
    fee: float = 0.0
    min_payout: float = 0
    last_block: float = 0
    donation: float = 0.0
    status: int = 0

    blocks: list[Block] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def fresh(self) -> "Pool":
        """Working copy for one adapter call; the cached entry is never touched."""
        return replace(self, blocks=list(self.blocks), extra=dict(self.extra))

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "api": self.api,
            "type": self.type,
            "mining_address": self.mining_address,
            "merged_mining": self.merged_mining,
            "merged_mining_is_parent_chain": self.merged_mining_is_parent_chain,
        }

    def to_status_record(self) -> dict[str, Any]:
        return {
            "pool_id": self.id,
            "height": self.height,
            "hashrate": self.hashrate,
            "miners": self.miners,
            "fee": self.fee,
            "min_payout": self.min_payout,
            "last_block": int(self.last_block),
            "donation": self.donation,
            "status": self.status,
        }


@dataclass(frozen=True)
class PoolError:
    """Sentinel result for a pool whose type has no adapter."""
    pool: Pool
    error: str

