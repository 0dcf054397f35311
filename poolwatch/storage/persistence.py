import logging
import time
from contextlib import contextmanager
from typing import Iterator, Protocol, Sequence

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from poolwatch.storage.models.pool_blocks import PoolBlock
from poolwatch.storage.models.pool_polling import PoolPolling
from poolwatch.storage.models.pools import PoolRecord
from poolwatch.utils.errors import PersistenceFailure
from poolwatch.utils.types import Pool

log = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """What the collector needs from a durable store. Every call may raise."""

    def save_pools(self, pools: Sequence[Pool]) -> None: ...

    def save_pools_polling(self, timestamp: int, pools: Sequence[Pool]) -> None: ...

    def save_pools_blocks(self, pools: Sequence[Pool]) -> None: ...

    def clean_polling_history(self, cutoff: int) -> None: ...


def _insert_for(session: Session):
    return sqlite_insert if session.bind.dialect.name == "sqlite" else pg_insert


class SqlPersistence:
    """SQLAlchemy-backed PersistenceGateway (PostgreSQL in production)."""

    def __init__(self, session_factory: sessionmaker, clock=time.time):
        self.session_factory = session_factory
        self.clock = clock

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceFailure(f"{action} failed: {e}") from e
        finally:
            session.close()

    def save_pools(self, pools: Sequence[Pool]) -> None:
        if not pools:
            return
        now = int(self.clock())
        # entries sharing an address triple share an id; the last one wins
        rows = list({pool.id: {**pool.to_record(), "updated_at": now} for pool in pools}.values())

        with self._session("save_pools") as db:
            insert = _insert_for(db)
            stmt = insert(PoolRecord).values(rows)
            stmt = stmt.on_conflict_do_update(
                index_elements=["id"],
                set_={col: stmt.excluded[col] for col in rows[0] if col != "id"},
            )
            db.execute(stmt)
        log.info(f"Upserted {len(rows)} pools")

    def save_pools_polling(self, timestamp: int, pools: Sequence[Pool]) -> None:
        rows = [{**pool.to_status_record(), "timestamp": int(timestamp)} for pool in pools]
        if not rows:
            return
        with self._session("save_pools_polling") as db:
            db.execute(PoolPolling.__table__.insert(), rows)

    def save_pools_blocks(self, pools: Sequence[Pool]) -> None:
        now = int(self.clock())
        rows = {}
        for pool in pools:
            for block in pool.blocks:
                # one row per (pool, height); the first (latest-ordered) entry wins
                rows.setdefault((pool.id, block.height), {
                    "pool_id": pool.id,
                    "height": block.height,
                    "hash": block.hash,
                    "timestamp": now,
                })
        if not rows:
            return

        with self._session("save_pools_blocks") as db:
            insert = _insert_for(db)
            stmt = insert(PoolBlock).values(list(rows.values()))
            stmt = stmt.on_conflict_do_update(
                index_elements=["pool_id", "height"],
                set_={"hash": stmt.excluded.hash, "timestamp": stmt.excluded.timestamp},
            )
            db.execute(stmt)

    def clean_polling_history(self, cutoff: int) -> None:
        with self._session("clean_polling_history") as db:
            polled = db.execute(delete(PoolPolling).where(PoolPolling.timestamp < cutoff))
            blocks = db.execute(delete(PoolBlock).where(PoolBlock.timestamp < cutoff))
        log.info(f"Pruned {polled.rowcount} polling rows and {blocks.rowcount} block rows before {cutoff}")
