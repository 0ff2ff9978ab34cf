"""
Shared fixtures: an in-memory connector standing in for Google Ads.
"""
import asyncio
from datetime import date

import pytest

from app.connectors.base_connector import BaseConnector
from app.models.insights import DataSource, DateRange
from app.services.demo_data import (
    DEMO_CALL_INTERACTIONS,
    DEMO_CAMPAIGNS,
    DEMO_CONVERSION_ACTIONS,
    DEMO_KEYWORDS,
    DEMO_LOCATIONS,
    demo_time_series,
)

RANGE_END = date(2024, 6, 30)


class FakeConnector(BaseConnector):
    """Serves canned rows per source; can fail, stall, or fail once per source."""

    RETRY_MAX_ATTEMPTS = 1
    RETRY_BASE_DELAY = 0.0
    RETRY_MAX_DELAY = 0.0
    REQUEST_TIMEOUT = None

    def __init__(self, rows=None, failures=None, configured=True, delay=0.0, flaky=()):
        super().__init__("Fake Ads")
        self.rows = rows or {}
        self.failures = failures or {}
        self.configured = configured
        self.delay = delay
        self.flaky = set(flaky)
        self.calls = []
        self.cancelled = []

    def is_configured(self):
        return self.configured

    def missing_configuration(self):
        return [] if self.configured else ["GOOGLE_ADS_DEVELOPER_TOKEN"]

    async def _serve(self, source, account_id):
        self.calls.append((source, account_id))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled.append(source)
            raise

        if source in self.flaky:
            self.flaky.discard(source)
            raise ConnectionError("connection reset by peer")
        if source in self.failures:
            raise self.failures[source]
        return list(self.rows.get(source, []))

    async def fetch_campaigns(self, account_id, date_range):
        return await self._serve(DataSource.CAMPAIGNS, account_id)

    async def fetch_keywords(self, account_id, date_range):
        return await self._serve(DataSource.KEYWORDS, account_id)

    async def fetch_geographic(self, account_id, date_range):
        return await self._serve(DataSource.GEOGRAPHIC, account_id)

    async def fetch_time_series(self, account_id, date_range):
        return await self._serve(DataSource.TIME_SERIES, account_id)

    async def fetch_conversion_actions(self, account_id, date_range):
        return await self._serve(DataSource.CONVERSION_ACTIONS, account_id)

    async def fetch_call_interactions(self, account_id, date_range):
        return await self._serve(DataSource.CALL_INTERACTIONS, account_id)


def sample_rows(end=RANGE_END):
    return {
        DataSource.CAMPAIGNS: DEMO_CAMPAIGNS,
        DataSource.KEYWORDS: DEMO_KEYWORDS,
        DataSource.GEOGRAPHIC: DEMO_LOCATIONS,
        DataSource.TIME_SERIES: demo_time_series(end),
        DataSource.CONVERSION_ACTIONS: DEMO_CONVERSION_ACTIONS,
        DataSource.CALL_INTERACTIONS: DEMO_CALL_INTERACTIONS,
    }


@pytest.fixture
def date_range():
    return DateRange(start=date(2024, 6, 1), end=RANGE_END)


@pytest.fixture
def make_connector():
    """Build a FakeConnector; sources default to the sample rows."""
    def factory(rows=None, **kwargs):
        return FakeConnector(rows=sample_rows() if rows is None else rows, **kwargs)
    return factory
