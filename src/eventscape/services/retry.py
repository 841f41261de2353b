"""Retry with exponential backoff for calls to external services."""

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from eventscape.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry an async call up to ``max_attempts`` times.

    The wait after attempt ``n`` (1-based) is ``base_delay * backoff_factor ** (n - 1)``,
    capped at ``max_delay``. Exceptions listed in ``non_retryable`` are raised
    straight away; anything else in ``retry_on`` is retried until attempts run
    out, then the last exception is raised.

    Examples:
        >>> policy = RetryPolicy(max_attempts=4, base_delay=1.0)
        >>> [policy.delay_for(n) for n in (1, 2, 3)]
        [1.0, 2.0, 4.0]
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 30.0
    retry_on: tuple[type[BaseException], ...] = (Exception,)
    non_retryable: tuple[type[BaseException], ...] = ()
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    @classmethod
    def from_settings(cls, **overrides: Any) -> "RetryPolicy":
        """Build a policy from the configured attempts and base delay."""
        values: dict[str, Any] = {
            "max_attempts": settings.retry_max_attempts,
            "base_delay": settings.retry_base_delay,
        }
        values.update(overrides)
        return cls(**values)

    def with_non_retryable(self, *exc_types: type[BaseException]) -> "RetryPolicy":
        """Return a copy that also gives up immediately on ``exc_types``."""
        return dataclasses.replace(self, non_retryable=self.non_retryable + exc_types)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt``."""
        return min(self.base_delay * self.backoff_factor ** (attempt - 1), self.max_delay)

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await ``func(*args, **kwargs)``, retrying failures per this policy."""
        name = getattr(func, "__qualname__", repr(func))
        attempt = 1
        while True:
            try:
                return await func(*args, **kwargs)
            except self.non_retryable:
                raise
            except self.retry_on as e:
                if attempt >= self.max_attempts:
                    logger.error(f"{name} failed after {attempt} attempts: {e}")
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} of {name} failed: {e}; "
                    f"retrying in {delay:.1f}s"
                )
                await self.sleep(delay)
                attempt += 1
