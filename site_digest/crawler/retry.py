"""
Exponential backoff with jitter, as a reusable policy object.

``sleep``, ``clock`` and ``rng`` are injectable so tests can drive the
policy without real waiting.
"""
from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterator, Optional, Tuple, Type, TypeVar

from site_digest.config import RetryConfig

__all__ = ("RetryExhausted", "RetryPolicy")

T = TypeVar("T")


class RetryExhausted(Exception):
    """Raised when the retry budget is spent without a successful attempt."""

    def __init__(self, last_error: BaseException, attempts: int) -> None:
        super().__init__(f"gave up after {attempts} attempt(s): {last_error}")
        self.last_error = last_error
        self.attempts = attempts


@dataclass
class RetryPolicy:
    initial_interval: float = 0.5
    multiplier: float = 1.5
    randomization_factor: float = 0.5
    max_interval: float = 60.0
    max_elapsed_time: float = 900.0
    max_attempts: Optional[int] = None
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    clock: Callable[[], float] = time.monotonic
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def from_config(cls, cfg: RetryConfig, **overrides) -> RetryPolicy:
        return cls(
            initial_interval=cfg.initial_interval,
            multiplier=cfg.multiplier,
            randomization_factor=cfg.randomization_factor,
            max_interval=cfg.max_interval,
            max_elapsed_time=cfg.max_elapsed_time,
            max_attempts=cfg.max_attempts,
            **overrides,
        )

    def intervals(self) -> Iterator[float]:
        """Infinite sequence of randomized, exponentially growing delays."""
        current = self.initial_interval
        while True:
            delta = self.randomization_factor * current
            yield self.rng.uniform(current - delta, current + delta)
            current = min(current * self.multiplier, self.max_interval)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        retry_on: Tuple[Type[BaseException], ...],
        on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    ) -> T:
        """Await ``operation()`` until it succeeds or the budget runs out.

        Exceptions outside *retry_on* propagate immediately. When the next
        wait would push past ``max_elapsed_time`` (or ``max_attempts`` is
        reached) :class:`RetryExhausted` is raised with the last error.
        """
        started = self.clock()
        delays = self.intervals()
        attempts = 0
        while True:
            attempts += 1
            try:
                return await operation()
            except retry_on as exc:
                if self.max_attempts is not None and attempts >= self.max_attempts:
                    raise RetryExhausted(exc, attempts) from exc
                delay = next(delays)
                if self.clock() - started + delay > self.max_elapsed_time:
                    raise RetryExhausted(exc, attempts) from exc
                if on_retry is not None:
                    on_retry(attempts, exc, delay)
                await self.sleep(delay)
