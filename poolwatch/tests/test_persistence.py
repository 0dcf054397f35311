from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from poolwatch.storage.db import init_db, make_engine, make_session_factory
from poolwatch.storage.models.pool_blocks import PoolBlock
from poolwatch.storage.models.pool_polling import PoolPolling
from poolwatch.storage.models.pools import PoolRecord
from poolwatch.sources.pool_list import normalize_entry
from poolwatch.storage import persistence
from poolwatch.storage.persistence import SqlPersistence
from poolwatch.utils.types import Block, Pool

NOW = 1_700_000_000


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'poolwatch.db'}")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return SqlPersistence(session_factory, clock=lambda: NOW)


def _pool(**fields) -> Pool:
    return Pool(id=fields.pop("id", "p1"), api="http://p/", type="forknote", **fields)


def test_save_pools_upserts_by_id(store, session_factory):
    store.save_pools([_pool(name="Old")])
    store.save_pools([_pool(name="New"), _pool(id="p2", name="Other")])

    with session_factory() as db:
        rows = {r.id: r.name for r in db.execute(select(PoolRecord)).scalars()}
    assert rows == {"p1": "New", "p2": "Other"}


def test_save_pools_collapses_entries_sharing_an_id(store, session_factory):
    # one operator, same payout address, two front-ends
    first = normalize_entry({"name": "Alpha", "api": "http://a.test/", "type": "forknote", "miningAddress": "TRTLx"})
    second = normalize_entry({"name": "Beta", "api": "http://b.test/", "type": "node.js", "miningAddress": "TRTLx"})
    assert first.id == second.id

    store.save_pools([first, second, _pool(id="p2", name="Other")])

    with session_factory() as db:
        rows = {r.id: (r.name, r.api) for r in db.execute(select(PoolRecord)).scalars()}
    assert rows == {first.id: ("Beta", "http://b.test/"), "p2": ("Other", "http://p/")}


def test_save_pools_sends_each_id_once_to_postgres(monkeypatch):
    pg_insert = MagicMock()
    monkeypatch.setattr(persistence, "pg_insert", pg_insert)
    session = MagicMock()
    session.bind.dialect.name = "postgresql"
    store = SqlPersistence(lambda: session, clock=lambda: NOW)

    store.save_pools([_pool(name="Alpha"), _pool(id="p2", name="Other"), _pool(name="Beta")])

    (rows,) = pg_insert.return_value.values.call_args.args
    assert [(r["id"], r["name"]) for r in rows] == [("p1", "Beta"), ("p2", "Other")]
    session.commit.assert_called_once()

def test_save_pools_polling_appends_snapshot(store, session_factory):
    store.save_pools_polling(NOW, [_pool(hashrate=10, fee=1.01, status=1)])
    store.save_pools_polling(NOW + 60, [_pool(hashrate=12, status=1)])

    with session_factory() as db:
        rows = db.execute(select(PoolPolling).order_by(PoolPolling.timestamp)).scalars().all()
    assert [(r.timestamp, r.hashrate) for r in rows] == [(NOW, 10), (NOW + 60, 12)]
    assert float(rows[0].fee) == 1.01


def test_save_pools_blocks_upserts_per_height(store, session_factory):
    store.save_pools_blocks([_pool(blocks=[Block(10, "a" * 64), Block(9, None)])])
    store.save_pools_blocks([_pool(blocks=[Block(10, "a" * 64), Block(9, "b" * 64)])])

    with session_factory() as db:
        rows = db.execute(select(PoolBlock).order_by(PoolBlock.height)).scalars().all()
    assert [(r.height, r.hash) for r in rows] == [(9, "b" * 64), (10, "a" * 64)]


def test_clean_history_uses_strict_cutoff(store, session_factory):
    cutoff = NOW - 21600
    store.save_pools_polling(NOW - 21601, [_pool()])
    store.save_pools_polling(NOW - 21599, [_pool()])

    store.clean_polling_history(cutoff)

    with session_factory() as db:
        left = db.execute(select(PoolPolling.timestamp)).scalars().all()
    assert left == [NOW - 21599]
