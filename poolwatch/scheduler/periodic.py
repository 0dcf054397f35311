import asyncio
import logging
from typing import Awaitable, Callable, Optional

log = logging.getLogger(__name__)


class PeriodicTask:
    """
    Fires `callback` every `interval` seconds while running.

    `pause`/`stop` only stop new ticks; a run already in flight is left to
    finish. With `allow_overlap=False` a tick that fires while the previous
    run is still going is skipped.
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], Awaitable[None]], allow_overlap: bool = False):
        self.name = name
        self.interval = interval
        self.callback = callback
        self.allow_overlap = allow_overlap
        self.paused = True
        self._loop_task: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def busy(self) -> bool:
        return bool(self._inflight)

    def start(self) -> None:
        self.paused = False
        if not self.running:
            self._loop_task = asyncio.get_running_loop().create_task(self._run(), name=f"periodic:{self.name}")

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    async def stop(self) -> None:
        self.paused = True
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

    def tick(self) -> Optional[asyncio.Task]:
        """Launch one run now (ignores the pause flag)."""
        if self._inflight and not self.allow_overlap:
            log.warning(f"[{self.name}] previous run still in progress, skipping tick")
            return None
        task = asyncio.get_running_loop().create_task(self.callback(), name=f"tick:{self.name}")
        self._inflight.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log.error(f"[{self.name}] tick failed", exc_info=task.exception())

    async def wait_idle(self) -> None:
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not self.paused:
                self.tick()
