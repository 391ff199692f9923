"""
Notes feature: Delay-and-coalesce timer on the running asyncio loop.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class DebounceTimer:
    """Runs the most recently scheduled coroutine function once `delay` seconds
    pass without another `schedule` call.

    `cancel` only discards an invocation that is still waiting; one that has
    started running is left to finish.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._pending: asyncio.Task | None = None
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self, fn: Callable[[], Awaitable[None]]) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._pending = loop.create_task(self._fire_after_delay(fn))

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def join(self) -> None:
        """Wait until nothing is waiting or running."""
        while self.pending or self._running:
            tasks = list(self._running)
            if self._pending is not None:
                tasks.append(self._pending)
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _fire_after_delay(self, fn: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay)

        # Detach: from here on a new schedule() must not cancel this invocation.
        task = asyncio.current_task()
        self._pending = None
        self._running.add(task)
        try:
            await fn()
        except Exception as e:
            logger.error(f"❌ Debounced call failed: {e}")
        finally:
            self._running.discard(task)
