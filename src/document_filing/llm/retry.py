# ============================================================================
# src/document_filing/llm/retry.py
# ============================================================================
"""
Bounded Retry Policy

One policy object shared by every external completion call:
- max attempts (first call included)
- exponential backoff: initial * multiplier**attempt, capped at max delay
- retryable predicate: TransientServiceError only (network, 5xx, 429)
- a server-supplied retry-after wins over the computed backoff
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional
import asyncio
import logging

from ...utils.exceptions import TransientServiceError
from ..config.retry_config import retry_settings

logger = logging.getLogger(__name__)


def is_retryable(error: Exception) -> bool:
    return isinstance(error, TransientServiceError)


@dataclass
class RetryPolicy:
    max_attempts: int = field(default_factory=lambda: retry_settings.MAX_ATTEMPTS)
    initial_delay: float = field(default_factory=lambda: retry_settings.INITIAL_DELAY_SECONDS)
    max_delay: float = field(default_factory=lambda: retry_settings.MAX_DELAY_SECONDS)
    multiplier: float = field(default_factory=lambda: retry_settings.BACKOFF_MULTIPLIER)
    retryable: Callable[[Exception], bool] = is_retryable
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    def backoff(self, attempt: int) -> float:
        """Delay after the given zero-based failed attempt."""
        return min(self.initial_delay * (self.multiplier ** attempt), self.max_delay)

    def delay_for(self, attempt: int, error: Exception) -> float:
        retry_after: Optional[float] = getattr(error, "retry_after", None)
        if retry_after is not None and retry_after >= 0:
            return retry_after
        return self.backoff(attempt)

    async def run(self, operation: Callable[[], Awaitable[Any]], description: str = "request") -> Any:
        """
        Await operation() until it succeeds, fails non-retryably, or the
        attempt budget is spent. The last error is re-raised.
        """
        for attempt in range(self.max_attempts):
            try:
                return await operation()
            except Exception as e:
                if not self.retryable(e):
                    raise
                if attempt >= self.max_attempts - 1:
                    logger.error(f"{description} failed after {self.max_attempts} attempts: {e}")
                    raise

                delay = self.delay_for(attempt, e)
                logger.warning(
                    f"{description} failed (attempt {attempt + 1}/{self.max_attempts}): {e}. "
                    f"Retrying in {delay:.1f}s"
                )
                await self.sleep(delay)


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy()
