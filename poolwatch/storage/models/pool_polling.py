from sqlalchemy import BigInteger, Column, Integer, Numeric, String, Index

from poolwatch.storage.models.base import Base


class PoolPolling(Base):
    """One row per pool per status tick."""
    __tablename__ = "pool_polling"

    id         = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    timestamp  = Column(Integer, nullable=False)
    pool_id    = Column(String(64), nullable=False)
    height     = Column(BigInteger, nullable=False, default=0)
    hashrate   = Column(BigInteger, nullable=False, default=0)
    miners     = Column(Integer, nullable=False, default=0)
    fee        = Column(Numeric(6, 2), nullable=False, default=0)
    min_payout = Column(Numeric(38, 8), nullable=False, default=0)
    last_block = Column(BigInteger, nullable=False, default=0)
    donation   = Column(Numeric(6, 2), nullable=False, default=0)
    status     = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_pool_polling_timestamp", "timestamp"),
        Index("ix_pool_polling_pool_ts", "pool_id", "timestamp"),
    )
