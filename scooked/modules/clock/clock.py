import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Protocol for time sources."""

    def now_ms(self) -> int:
        """Current wall-clock time in milliseconds since the epoch."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task without blocking the event loop."""
        ...


class SystemClock:
    """Clock backed by time.time() and asyncio.sleep()."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class TickLoop:
    """
    Fixed-interval tick source running as a single asyncio task.

    The callback is awaited after every interval. It returns True to keep
    ticking and False to end the loop, which lets the callback tear the loop
    down from inside a tick without cancelling its own task.
    """

    def __init__(
        self,
        clock: Clock,
        callback: Callable[[], Awaitable[bool]],
        interval: float = 1.0,
        name: str = "tick-loop",
    ):
        """
        Initialize tick loop.

        Args:
            clock: Clock used for the interval sleep
            callback: Coroutine function invoked on each tick
            interval: Seconds between ticks
            name: Task name, for debugging
        """
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")
        self.clock = clock
        self.callback = callback
        self.interval = interval
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def alive(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the loop. Starting a live loop is a no-op."""
        if self.alive:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    def cancel(self) -> None:
        """Cancel the loop synchronously; the pending tick never fires."""
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        while True:
            await self.clock.sleep(self.interval)
            if not await self.callback():
                break
        logger.debug(f"{self.name} finished")
