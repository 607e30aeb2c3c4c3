import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ..clock import Clock, SystemClock

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    def __init__(self, clock: Optional[Clock] = None, max_attempts: int = 3, delay_ms: int = 1000):
        """
        Initialize retry executor.

        Args:
            clock: Clock used to schedule backoff delays
            max_attempts: Total attempts including the first one
            delay_ms: Base delay; attempt i waits delay_ms * 2**i before retrying
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        if delay_ms < 0:
            raise ValueError(f"delay_ms must not be negative, got {delay_ms}")
        self.clock = clock or SystemClock()
        self.max_attempts = max_attempts
        self.delay_ms = delay_ms

    def backoff_ms(self, attempt_index: int) -> int:
        """Delay after the failed attempt with the given zero-based index."""
        return self.delay_ms * (2**attempt_index)

    async def run(self, operation: Callable[[], Awaitable[T]], description: str = "operation") -> T:
        """
        Run operation, retrying on failure.

        Args:
            operation: Zero-argument coroutine function; re-invoked in full
                on every attempt
            description: Label used in log lines

        Returns:
            Whatever the first successful attempt returns

        Raises:
            The exception of the final attempt, unchanged
        """
        for attempt in range(self.max_attempts):
            try:
                return await operation()
            except Exception as e:
                if attempt == self.max_attempts - 1:
                    logger.error(f"{description} failed after {self.max_attempts} attempts: {e}")
                    raise

                delay = self.backoff_ms(attempt)
                logger.warning(
                    f"{description} failed (attempt {attempt + 1}/{self.max_attempts}): {e}; "
                    f"retrying in {delay}ms"
                )
                await self.clock.sleep(delay / 1000)

        # Unreachable: the loop either returns or re-raises
        raise RuntimeError("retry loop exited without result")
