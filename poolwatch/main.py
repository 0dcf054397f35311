# poolwatch/main.py
import asyncio
import logging
import signal
from typing import Optional

import typer

from poolwatch.config.settings import CollectorSettings
from poolwatch.scheduler.collector import Collector
from poolwatch.storage.db import init_db, make_engine, make_session_factory, wait_for_database
from poolwatch.storage.persistence import SqlPersistence
from poolwatch.utils.shortname import ShortNameFilter

log = logging.getLogger(__name__)

app = typer.Typer(help="Collect mining pool status and block history")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="[%(levelname)s] %(shortname)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(ShortNameFilter())


def _build(settings: CollectorSettings) -> Collector:
    engine = make_engine(settings.database_url)
    wait_for_database(engine)
    init_db(engine)
    return Collector(settings, SqlPersistence(make_session_factory(engine)))


async def _run_forever(settings: CollectorSettings) -> None:
    collector = _build(settings)
    stopped = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stopped.set)

    collector.start()
    log.info(f"Collector running: polling every {settings.polling_interval}s, list refresh every {settings.update_interval}s")
    try:
        await stopped.wait()
    finally:
        log.info("Stopping collector…")
        await collector.close()


async def _run_once(settings: CollectorSettings) -> None:
    collector = _build(settings)
    try:
        await collector.run_once()
    finally:
        await collector.close()


def _settings(pool_list, polling_interval, update_interval, history_days, database_url) -> CollectorSettings:
    try:
        return CollectorSettings.from_env(
            pool_list=pool_list,
            polling_interval=polling_interval,
            update_interval=update_interval,
            history_days=history_days,
            database_url=database_url,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))


@app.command("run")
def run(
    pool_list: Optional[str] = typer.Option(None, help="URL of the public pool list (POOL_LIST_URL)"),
    polling_interval: Optional[float] = typer.Option(None, help="Seconds between status/block polls"),
    update_interval: Optional[float] = typer.Option(None, help="Seconds between pool list refreshes"),
    history_days: Optional[float] = typer.Option(None, help="Days of polling history to keep"),
    database_url: Optional[str] = typer.Option(None, help="SQLAlchemy database URL"),
    log_level: str = typer.Option("info", help="Logging level"),
):
    """Run the collector until interrupted."""
    _configure_logging(log_level)
    settings = _settings(pool_list, polling_interval, update_interval, history_days, database_url)
    asyncio.run(_run_forever(settings))


@app.command("once")
def once(
    pool_list: Optional[str] = typer.Option(None, help="URL of the public pool list (POOL_LIST_URL)"),
    history_days: Optional[float] = typer.Option(None, help="Days of polling history to keep"),
    database_url: Optional[str] = typer.Option(None, help="SQLAlchemy database URL"),
    log_level: str = typer.Option("info", help="Logging level"),
):
    """Refresh the list, poll status and blocks once, then exit."""
    _configure_logging(log_level)
    settings = _settings(pool_list, None, None, history_days, database_url)
    asyncio.run(_run_once(settings))


def main():
    app()


if __name__ == "__main__":
    main()
