"""
Concurrent fetch of every report source with per-source failure isolation.

All sources run at once and are awaited jointly; one failing source never
aborts or blocks the rest. Each outcome is recorded as a tagged
``SourceResult`` and failures become empty row lists for consumers, with the
reason kept in the report's diagnostics. No retries happen here: that policy
belongs to the connector.
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.connectors.base_connector import BaseConnector
from app.errors import SourceFetchError
from app.models.insights import DataSource, DateRange
from app.utils.logger import log

ALL_SOURCES: Tuple[DataSource, ...] = tuple(DataSource)


@dataclass(frozen=True)
class SourceResult:
    """Outcome of one source fetch: rows on success, a reason on failure"""
    source: DataSource
    ok: bool
    rows: Tuple[Any, ...] = ()
    error: Optional[str] = None
    duration: float = 0.0

    @classmethod
    def success(cls, source: DataSource, rows: Iterable[Any], duration: float = 0.0) -> "SourceResult":
        return cls(source=source, ok=True, rows=tuple(rows), duration=duration)

    @classmethod
    def failure(cls, source: DataSource, error: str, duration: float = 0.0) -> "SourceResult":
        return cls(source=source, ok=False, error=error, duration=duration)

    def to_dict(self) -> Dict[str, Any]:
        status = {"success": self.ok, "records": len(self.rows), "duration": round(self.duration, 3)}
        if not self.ok:
            status["error"] = self.error
        return status


@dataclass(frozen=True)
class FetchReport:
    """Every source's outcome for one insights run"""
    results: Dict[DataSource, SourceResult] = field(default_factory=dict)

    def rows(self, source: DataSource) -> List[Any]:
        """Rows for a source; empty when it failed or was not fetched"""
        result = self.results.get(source)
        if result is None or not result.ok:
            return []
        return list(result.rows)

    @property
    def failures(self) -> Dict[DataSource, str]:
        return {s: r.error for s, r in self.results.items() if not r.ok}

    @property
    def succeeded(self) -> List[DataSource]:
        return [s for s, r in self.results.items() if r.ok]

    def errors(self) -> List[SourceFetchError]:
        return [SourceFetchError(s.value, reason) for s, reason in self.failures.items()]

    def diagnostics(self) -> Dict[str, Dict[str, Any]]:
        return {s.value: r.to_dict() for s, r in self.results.items()}


def describe_error(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "timeout"
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


async def fetch_source(
    connector: BaseConnector,
    source: DataSource,
    account_id: str,
    date_range: DateRange,
) -> SourceResult:
    """Fetch one source and settle it into a SourceResult; never raises Exception."""
    start_time = time.time()
    try:
        rows = await connector.fetch(source, account_id, date_range)
    except Exception as e:
        elapsed = time.time() - start_time
        reason = describe_error(e)
        log.warning(f"{source.value} fetch failed for account {account_id}: {reason}")
        return SourceResult.failure(source, reason, elapsed)

    return SourceResult.success(source, rows, time.time() - start_time)


async def fetch_all(
    connector: BaseConnector,
    account_id: str,
    date_range: DateRange,
    sources: Iterable[DataSource] = ALL_SOURCES,
) -> FetchReport:
    """
    Run every source fetch concurrently and wait for all of them to settle.

    Cancelling the caller cancels the in-flight fetches; nothing partial is
    returned in that case.
    """
    sources = tuple(sources)
    log.info(f"Fetching {len(sources)} sources for account {account_id} ({date_range.start} to {date_range.end})")

    outcomes = await asyncio.gather(
        *(fetch_source(connector, source, account_id, date_range) for source in sources)
    )
    report = FetchReport(results={result.source: result for result in outcomes})

    if report.failures:
        log.warning(
            f"{len(report.failures)}/{len(sources)} sources failed for account {account_id}: "
            f"{', '.join(s.value for s in report.failures)}"
        )
    else:
        log.info(f"All {len(sources)} sources fetched for account {account_id}")

    return report
