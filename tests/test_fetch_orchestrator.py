"""
Fetch orchestrator tests.

Guards against:
1. One failing source aborting the whole fetch
2. Failure reasons getting lost instead of landing in diagnostics
3. Retries leaking out of the connector into the orchestrator
4. Cancellation leaving fetches running
"""
import asyncio

from app.errors import SourceFetchError
from app.models.insights import DataSource
from app.services.fetch_orchestrator import ALL_SOURCES, describe_error, fetch_all


def _run(coro):
    """Run an async coroutine in a sync test."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Success and partial failure
# ---------------------------------------------------------------------------

def test_all_sources_succeed(make_connector, date_range):
    connector = make_connector()
    report = _run(fetch_all(connector, "123", date_range))

    assert set(report.succeeded) == set(ALL_SOURCES)
    assert report.failures == {}
    assert len(report.rows(DataSource.CAMPAIGNS)) == 2
    assert len(connector.calls) == len(ALL_SOURCES)


def test_failed_source_becomes_empty_rows(make_connector, date_range):
    connector = make_connector(failures={DataSource.GEOGRAPHIC: PermissionError("permission denied")})
    report = _run(fetch_all(connector, "123", date_range))

    assert report.rows(DataSource.GEOGRAPHIC) == []
    assert report.failures == {DataSource.GEOGRAPHIC: "PermissionError: permission denied"}
    assert len(report.succeeded) == len(ALL_SOURCES) - 1
    assert len(report.rows(DataSource.KEYWORDS)) == 4


def test_every_source_failing_still_returns_report(make_connector, date_range):
    failures = {source: RuntimeError("boom") for source in ALL_SOURCES}
    report = _run(fetch_all(make_connector(failures=failures), "123", date_range))

    assert report.succeeded == []
    assert all(report.rows(source) == [] for source in ALL_SOURCES)


def test_diagnostics_and_errors(make_connector, date_range):
    connector = make_connector(failures={DataSource.KEYWORDS: ValueError("bad response")})
    report = _run(fetch_all(connector, "123", date_range))

    diagnostics = report.diagnostics()
    assert diagnostics["keywords"]["success"] is False
    assert diagnostics["keywords"]["error"] == "ValueError: bad response"
    assert diagnostics["campaigns"]["success"] is True
    assert diagnostics["campaigns"]["records"] == 2

    errors = report.errors()
    assert len(errors) == 1
    assert isinstance(errors[0], SourceFetchError)
    assert errors[0].source == "keywords"


def test_subset_of_sources(make_connector, date_range):
    connector = make_connector()
    report = _run(fetch_all(connector, "123", date_range, sources=[DataSource.CAMPAIGNS]))

    assert list(report.results) == [DataSource.CAMPAIGNS]
    assert report.rows(DataSource.TIME_SERIES) == []


# ---------------------------------------------------------------------------
# Connector retry and timeout policy
# ---------------------------------------------------------------------------

def test_timeout_is_reported_as_timeout(make_connector, date_range):
    connector = make_connector(delay=1.0)
    connector.REQUEST_TIMEOUT = 0.01
    report = _run(fetch_all(connector, "123", date_range, sources=[DataSource.CAMPAIGNS]))

    assert report.failures == {DataSource.CAMPAIGNS: "timeout"}


def test_transient_error_is_retried_by_connector(make_connector, date_range):
    connector = make_connector(flaky=[DataSource.CAMPAIGNS])
    connector.RETRY_MAX_ATTEMPTS = 2
    report = _run(fetch_all(connector, "123", date_range, sources=[DataSource.CAMPAIGNS]))

    assert report.failures == {}
    assert len(connector.calls) == 2
    assert connector.retry_count == 1
    assert connector.get_status()["error_count"] == 0


def test_permission_error_is_not_retried(make_connector, date_range):
    connector = make_connector(failures={DataSource.CAMPAIGNS: PermissionError("permission denied")})
    connector.RETRY_MAX_ATTEMPTS = 3
    _run(fetch_all(connector, "123", date_range, sources=[DataSource.CAMPAIGNS]))

    assert len(connector.calls) == 1
    assert connector.error_count == 1


def test_describe_error():
    assert describe_error(asyncio.TimeoutError()) == "timeout"
    assert describe_error(RuntimeError()) == "RuntimeError"
    assert describe_error(RuntimeError("x")) == "RuntimeError: x"


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------

def test_cancelling_caller_cancels_all_fetches(make_connector, date_range):
    connector = make_connector(delay=10.0)

    async def scenario():
        task = asyncio.ensure_future(fetch_all(connector, "123", date_range))
        await asyncio.sleep(0.05)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            return True
        return False

    assert _run(scenario()) is True
    assert set(connector.cancelled) == set(ALL_SOURCES)
