"""Randomized politeness delays between requests to one store."""

import asyncio
import random
from dataclasses import dataclass

from akcija.config import settings


@dataclass(frozen=True)
class DelayPolicy:
    """Uniform random delay in ``[min_seconds, max_seconds]``.

    Scrapers receive a policy instead of sleeping on inline constants, so
    tests pass ``DelayPolicy.none()`` and run without waiting.
    """

    min_seconds: float = 0.0
    max_seconds: float = 0.0

    def __post_init__(self):
        if self.min_seconds < 0 or self.max_seconds < self.min_seconds:
            raise ValueError("delay bounds must satisfy 0 <= min_seconds <= max_seconds")

    def next_delay(self) -> float:
        if self.max_seconds <= 0:
            return 0.0
        return random.uniform(self.min_seconds, self.max_seconds)

    async def wait(self) -> None:
        delay = self.next_delay()
        if delay > 0:
            await asyncio.sleep(delay)

    @classmethod
    def none(cls) -> "DelayPolicy":
        return cls(0.0, 0.0)

    @classmethod
    def browser(cls) -> "DelayPolicy":
        return cls(settings.BROWSER_DELAY_MIN, settings.BROWSER_DELAY_MAX)

    @classmethod
    def http(cls) -> "DelayPolicy":
        return cls(settings.HTTP_DELAY_MIN, settings.HTTP_DELAY_MAX)

    @classmethod
    def detail(cls) -> "DelayPolicy":
        return cls(settings.DETAIL_DELAY_MIN, settings.DETAIL_DELAY_MAX)
