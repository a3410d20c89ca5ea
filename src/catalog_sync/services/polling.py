"""Poll policy for long-running destination operations."""

import asyncio
from collections.abc import Awaitable, Callable, Iterator

from catalog_sync.config import Settings

Sleep = Callable[[float], Awaitable[None]]


class PollPolicy:
    """How often, and how many times, to poll before giving up.

    The interval grows by ``backoff`` after each attempt, capped at
    ``max_interval``. ``sleep`` is injectable so tests need not wait.
    """

    def __init__(
        self,
        interval: float = 10.0,
        max_attempts: int = 30,
        backoff: float = 1.0,
        max_interval: float = 60.0,
        sleep: Sleep = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.interval = interval
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.max_interval = max_interval
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, sleep: Sleep = asyncio.sleep) -> "PollPolicy":
        return cls(
            interval=settings.operation_poll_interval_seconds,
            max_attempts=settings.operation_poll_max_attempts,
            backoff=settings.operation_poll_backoff,
            max_interval=settings.operation_poll_max_interval_seconds,
            sleep=sleep,
        )

    def calculate_delay(self, attempt: int) -> float:
        """Delay after the given zero-based attempt."""
        return min(self.interval * (self.backoff ** attempt), self.max_interval)

    def delays(self) -> Iterator[float]:
        for attempt in range(self.max_attempts):
            yield self.calculate_delay(attempt)

    @property
    def max_duration(self) -> float:
        return sum(self.delays())
