"""
Base connector class for reporting data providers
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List
import asyncio
import time

from app.models.insights import DataSource, DateRange
from app.utils.logger import log
from app.utils.retry import RetryStats, retry_with_backoff


class BaseConnector(ABC):
    """
    Base class for providers that return raw report rows.

    The insights pipeline consumes exactly one capability: ``fetch`` rows of a
    given source for an account over a date range, or raise. Retry and
    timeout policy live here, not in the pipeline.
    """

    # Retry configuration (can be overridden by subclasses)
    RETRY_MAX_ATTEMPTS = 3
    RETRY_BASE_DELAY = 2.0  # seconds
    RETRY_MAX_DELAY = 30.0  # seconds
    REQUEST_TIMEOUT = 30.0  # seconds per attempt; None disables

    def __init__(self, name: str):
        self.name = name
        self.fetch_count = 0
        self.error_count = 0
        self.retry_count = 0  # Total retries across all fetches

    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials needed to reach the provider are present"""
        pass

    def missing_configuration(self) -> List[str]:
        """Names of missing settings, for diagnostics"""
        return []

    @abstractmethod
    async def fetch_campaigns(self, account_id: str, date_range: DateRange) -> List[Any]:
        pass

    @abstractmethod
    async def fetch_keywords(self, account_id: str, date_range: DateRange) -> List[Any]:
        pass

    @abstractmethod
    async def fetch_geographic(self, account_id: str, date_range: DateRange) -> List[Any]:
        pass

    @abstractmethod
    async def fetch_time_series(self, account_id: str, date_range: DateRange) -> List[Any]:
        pass

    @abstractmethod
    async def fetch_conversion_actions(self, account_id: str, date_range: DateRange) -> List[Any]:
        pass

    @abstractmethod
    async def fetch_call_interactions(self, account_id: str, date_range: DateRange) -> List[Any]:
        pass

    async def fetch(self, source: DataSource, account_id: str, date_range: DateRange) -> List[Any]:
        """
        Fetch rows for one source with retry and per-attempt timeout.

        Raises whatever the final attempt raised; a timeout surfaces as
        ``asyncio.TimeoutError``.
        """
        handler = getattr(self, f"fetch_{source.value}")
        label = f"{self.name} {source.value}"
        stats = RetryStats()
        start_time = time.time()

        async def attempt():
            if self.REQUEST_TIMEOUT is None:
                return await handler(account_id, date_range)
            return await asyncio.wait_for(handler(account_id, date_range), timeout=self.REQUEST_TIMEOUT)

        self.fetch_count += 1
        try:
            rows = await retry_with_backoff(
                attempt,
                label=label,
                max_attempts=self.RETRY_MAX_ATTEMPTS,
                base_delay=self.RETRY_BASE_DELAY,
                max_delay=self.RETRY_MAX_DELAY,
                stats=stats,
            )
        except Exception:
            self.error_count += 1
            raise
        finally:
            self.retry_count += max(stats.attempts - 1, 0)

        elapsed = time.time() - start_time
        log.info(f"Fetched {len(rows)} {source.value} rows from {self.name} in {elapsed:.2f}s")
        return list(rows)

    def get_status(self) -> Dict[str, Any]:
        """Get connector status"""
        return {
            "name": self.name,
            "configured": self.is_configured(),
            "missing": self.missing_configuration(),
            "fetch_count": self.fetch_count,
            "error_count": self.error_count,
            "retry_count": self.retry_count,
            "error_rate": self.error_count / max(self.fetch_count, 1),
            "retry_config": {
                "max_attempts": self.RETRY_MAX_ATTEMPTS,
                "base_delay": self.RETRY_BASE_DELAY,
                "max_delay": self.RETRY_MAX_DELAY,
                "timeout": self.REQUEST_TIMEOUT,
            }
        }
