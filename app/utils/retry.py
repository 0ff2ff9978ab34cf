"""
Retry utilities with exponential backoff for provider calls.

Only provider adapters retry. The fetch orchestrator runs every source once
and records whatever the adapter finally returns or raises.
"""
import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Tuple, Type, TypeVar
from app.utils.logger import log

T = TypeVar("T")


@dataclass
class RetryStats:
    """Tracks retry statistics for a single provider call."""
    attempts: int = 0
    total_delay_seconds: float = 0.0
    last_error: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    def record_failure(self, error: Exception, delay: float = 0.0):
        error_str = f"{type(error).__name__}: {str(error)}"
        self.last_error = error_str
        self.errors.append(error_str)
        self.total_delay_seconds += delay

    def to_dict(self) -> dict:
        return {
            "attempts": self.attempts,
            "total_delay_seconds": round(self.total_delay_seconds, 2),
            "last_error": self.last_error,
            "errors": self.errors[:5]  # Cap at 5 errors
        }


# Network-level failures worth another attempt
DEFAULT_RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
)

# Substrings that mark a failure as permanent even if it looks transient
PERMANENT_ERROR_MARKERS = (
    "permission",
    "authentication",
    "unauthenticated",
    "not authorized",
    "invalid_grant",
    "developer_token",
)


def calculate_backoff(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True
) -> float:
    """
    Calculate delay for exponential backoff.

    Args:
        attempt: Current attempt number (1-indexed)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay cap
        exponential_base: Base for exponential calculation
        jitter: Add 0-25% randomness

    Returns:
        Delay in seconds
    """
    delay = min(base_delay * (exponential_base ** (attempt - 1)), max_delay)
    if jitter:
        delay += delay * random.uniform(0, 0.25)
    return delay


def is_retryable_error(
    error: Exception,
    retryable_exceptions: Tuple[Type[Exception], ...] = DEFAULT_RETRYABLE_EXCEPTIONS,
    retryable_status_codes: Tuple[int, ...] = (429, 500, 502, 503, 504)
) -> bool:
    """
    Check if a provider error is transient.

    Permission and authentication failures never retry: the same request
    will be denied again.
    """
    error_str = str(error).lower()

    if any(marker in error_str for marker in PERMANENT_ERROR_MARKERS):
        return False

    if isinstance(error, retryable_exceptions):
        return True

    if "rate limit" in error_str or "too many requests" in error_str or "resource_exhausted" in error_str:
        return True

    for code in retryable_status_codes:
        if str(code) in error_str:
            return True

    if "timeout" in error_str or "timed out" in error_str or "deadline exceeded" in error_str:
        return True

    if "connection" in error_str and ("refused" in error_str or "reset" in error_str or "failed" in error_str):
        return True

    return False


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    label: str,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    stats: Optional[RetryStats] = None
) -> T:
    """
    Await ``operation()`` until it succeeds, fails permanently, or attempts run out.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        label: Name used in log lines
        max_attempts: Total attempts including the first
        stats: Optional RetryStats mutated in place

    Returns:
        Result of the successful attempt
    """
    stats = stats if stats is not None else RetryStats()

    for attempt in range(1, max_attempts + 1):
        stats.attempts = attempt
        try:
            result = await operation()
            if attempt > 1:
                log.info(f"{label} succeeded on attempt {attempt} after {stats.total_delay_seconds:.1f}s delay")
            return result

        except Exception as e:
            if attempt >= max_attempts or not is_retryable_error(e):
                stats.record_failure(e)
                raise

            delay = calculate_backoff(attempt, base_delay=base_delay, max_delay=max_delay)
            stats.record_failure(e, delay)
            log.warning(f"{label} attempt {attempt} failed: {e}. Retrying in {delay:.1f}s...")
            await asyncio.sleep(delay)

    raise RuntimeError(f"{label}: retry exhausted")
