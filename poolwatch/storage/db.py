import logging

import backoff
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from poolwatch.config.settings import DATABASE_URL
from poolwatch.storage.models.base import Base
from poolwatch.storage.models import pool_blocks, pool_polling, pools  # noqa: F401  (register tables)

log = logging.getLogger(__name__)


def make_engine(database_url: str = DATABASE_URL) -> Engine:
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


@backoff.on_exception(backoff.expo, OperationalError, max_tries=5, jitter=None)
def wait_for_database(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    log.info("✅ Database connected.")


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)
