import logging
from typing import Protocol, Sequence

from poolwatch.utils.types import Pool

log = logging.getLogger(__name__)


class CollectorObserver(Protocol):
    def on_update(self, pools: Sequence[Pool]) -> None: ...

    def on_info(self, message: str) -> None: ...

    def on_error(self, message: str) -> None: ...


class LoggingObserver:
    """Default observer: info/error go to the log, updates are summarized."""

    def __init__(self, logger: logging.Logger = log):
        self.logger = logger

    def on_update(self, pools: Sequence[Pool]) -> None:
        self.logger.info(f"🔄 Pool list updated: {len(pools)} pools")

    def on_info(self, message: str) -> None:
        self.logger.info(message)

    def on_error(self, message: str) -> None:
        self.logger.error(f"❌ {message}")
