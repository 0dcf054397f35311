# models/pools.py
from sqlalchemy import Column, Integer, String, Index

from poolwatch.storage.models.base import Base


class PoolRecord(Base):
    __tablename__ = "pools"

    id                            = Column(String(64), primary_key=True)   # hmac of the mining address triple
    name                          = Column(String(128), nullable=False, default="")
    url                           = Column(String(256), nullable=False, default="")
    api                           = Column(String(256), nullable=False)
    type                          = Column(String(32),  nullable=False)    # forknote / node.js / …
    mining_address                = Column(String(256), nullable=False, default="")
    merged_mining                 = Column(Integer, nullable=False, default=0)
    merged_mining_is_parent_chain = Column(Integer, nullable=False, default=0)
    updated_at                    = Column(Integer, nullable=False)       # epoch‑seconds of the last list refresh

    __table_args__ = (
        Index("ix_pools_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<PoolRecord {self.type} {self.name or self.api} {self.id[:8]}>"
