from sqlalchemy import BigInteger, Column, Integer, String, Index, PrimaryKeyConstraint

from poolwatch.storage.models.base import Base


class PoolBlock(Base):
    """A block found by a pool; `timestamp` is the last tick that reported it."""
    __tablename__ = "pool_blocks"

    pool_id   = Column(String(64), nullable=False)
    height    = Column(BigInteger, nullable=False)
    hash      = Column(String(64), nullable=True)
    timestamp = Column(Integer, nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint("pool_id", "height"),
        Index("ix_pool_blocks_timestamp", "timestamp"),
    )
