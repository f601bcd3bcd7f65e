"""Repeat an action at a fixed cadence while a button is held."""
import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class HoldRepeatTimer:
    """At most one repeating run; start() replaces any previous run."""

    def __init__(self) -> None:
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, action: Callable[[], None], interval_ms: float) -> None:
        """Call action every interval_ms (first call after one interval). Needs a running loop."""
        self.stop()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(action, interval_ms / 1000.0))

    def stop(self) -> None:
        """Idempotent."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, action: Callable[[], None], interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                action()
            except Exception as e:
                logger.warning("Hold repeat: %s", e)
