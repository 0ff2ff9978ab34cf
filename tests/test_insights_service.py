"""
Restaurant insights service tests.

Guards against:
1. Missing configuration triggering a fetch instead of demo data
2. A single failing source collapsing the whole response
3. Assembly crashes escaping to the caller
4. Campaign spend and time-series spend drifting apart
5. Demo figures changing between runs
"""
import asyncio
import json
from datetime import date
from decimal import Decimal

import pytest

from app.errors import InvalidAmount, InvalidDateRange
from app.models.insights import (
    AcquisitionTrend,
    DataSource,
    DateRange,
    RawCampaign,
    RawKeyword,
)
from app.services import insights_service as service_module
from app.services.demo_data import DEMO_CAMPAIGNS, build_demo_insights, demo_time_series
from app.services.insights_assembler import per_conversion, reconcile_spend
from app.services.insights_service import RestaurantInsightsService
from app.services.normalizer import sum_currency


def _run(coro):
    """Run an async coroutine in a sync test."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Demo short-circuits
# ---------------------------------------------------------------------------

def test_not_configured_serves_demo_without_fetching(make_connector, date_range):
    connector = make_connector(configured=False)
    insights = _run(RestaurantInsightsService(connector).compute_insights("123", date_range))

    assert insights.demo is True
    assert connector.calls == []
    status = insights.to_dict()["configurationStatus"]
    assert status["issue"] == "missing_credentials"
    assert status["missing"] == ["GOOGLE_ADS_DEVELOPER_TOKEN"]


def test_missing_account_serves_demo_without_fetching(make_connector, date_range):
    connector = make_connector()
    insights = _run(RestaurantInsightsService(connector).compute_insights(None, date_range))

    assert insights.demo is True
    assert connector.calls == []
    assert insights.configuration_status["issue"] == "missing_account_id"


def test_demo_account_id_is_not_fetched(make_connector, date_range):
    connector = make_connector()
    insights = _run(RestaurantInsightsService(connector, "demo").compute_insights("", date_range))

    assert insights.demo is True
    assert connector.calls == []


def test_default_account_used_when_none_given(make_connector, date_range):
    connector = make_connector()
    insights = _run(RestaurantInsightsService(connector, "123-456-7890").compute_insights(None, date_range))

    assert insights.demo is False
    assert insights.account_id == "123-456-7890"
    assert {account for _, account in connector.calls} == {"123-456-7890"}


# ---------------------------------------------------------------------------
# Real path
# ---------------------------------------------------------------------------

def test_real_insights_from_all_sources(make_connector, date_range):
    insights = _run(RestaurantInsightsService(make_connector()).compute_insights("123", date_range))

    assert insights.demo is False
    assert insights.configuration_status is None
    assert insights.total_spend == Decimal("324.58")
    assert insights.total_conversions == 89
    assert insights.average_order_value == Decimal("30.00")
    assert insights.cost_per_conversion == Decimal("3.65")
    assert insights.phone_call_conversions == 25
    assert insights.website_conversions == 45
    assert insights.directions_conversions == 19
    assert insights.total_phone_calls == 25
    assert insights.peak_hours == ()
    assert len(insights.peak_days) == 7
    assert insights.peak_days[0].day == "Saturday"
    assert insights.acquisition_trend == AcquisitionTrend.STABLE

    data = insights.to_dict()
    assert "configurationStatus" not in data
    assert all(s["success"] for s in data["sourceStatus"].values())
    assert data["dateRange"] == {"startDate": "2024-06-01", "endDate": "2024-06-30"}
    json.dumps(data)


def test_partial_geographic_failure(make_connector, date_range):
    connector = make_connector(failures={DataSource.GEOGRAPHIC: PermissionError("permission denied")})
    insights = _run(RestaurantInsightsService(connector).compute_insights("123", date_range))

    assert insights.demo is False
    assert insights.geographic_hotspots == ()
    assert len(insights.top_performing_campaigns) == 2
    assert insights.total_spend == Decimal("324.58")
    assert insights.source_status["geographic"]["success"] is False
    assert "permission denied" in insights.source_status["geographic"]["error"]


def test_full_row_lists_survive_partial_failure(make_connector, date_range):
    connector = make_connector(failures={DataSource.GEOGRAPHIC: RuntimeError("unavailable")})
    connector.rows[DataSource.CAMPAIGNS] = [
        RawCampaign(id=str(i), name=f"Campaign {i}", cost_micros=1_000_000, conversions=i)
        for i in range(8)
    ]
    data = _run(RestaurantInsightsService(connector).compute_insights("123", date_range)).to_dict()

    assert len(data["topPerformingCampaigns"]) == 5
    assert [c["campaignName"] for c in data["campaigns"]] == [f"Campaign {i}" for i in range(8)]
    assert len(data["keywords"]) == 4
    assert data["keywords"][3]["keyword"] == "takeout food"
    assert data["geographic"] == []
    assert len(data["timeSeries"]) == 28
    assert len(data["conversionActions"]) == 5
    assert len(data["callInteractions"]) == 1


def test_all_sources_failing_returns_empty_real_result(make_connector, date_range):
    failures = {source: RuntimeError("unavailable") for source in DataSource}
    insights = _run(RestaurantInsightsService(make_connector(failures=failures)).compute_insights("123", date_range))

    assert insights.demo is False
    assert insights.total_spend == Decimal("0.00")
    assert insights.cost_per_conversion == Decimal("0.00")
    assert insights.average_order_frequency == 0.0
    assert [d.conversions for d in insights.peak_days] == [0] * 7
    assert insights.acquisition_trend == AcquisitionTrend.STABLE


def test_keyword_ranking_falls_back_to_cost(make_connector, date_range):
    rows = {
        DataSource.KEYWORDS: [
            RawKeyword(id="1", text="pizza", cost_micros=1_000_000),
            RawKeyword(id="2", text="sushi", cost_micros=9_000_000),
        ],
    }
    insights = _run(RestaurantInsightsService(make_connector(rows=rows)).compute_insights("123", date_range))

    assert [k.text for k in insights.top_keywords] == ["sushi", "pizza"]
    data = insights.to_dict()
    assert data["topKeywordsUsedFallback"] is True
    assert data["topKeywordsRankedBy"] == "cost"


# ---------------------------------------------------------------------------
# Error routing
# ---------------------------------------------------------------------------

def test_assembly_failure_falls_back_to_demo(make_connector, date_range, monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("unexpected row shape")

    monkeypatch.setattr(service_module, "assemble_insights", broken)
    connector = make_connector()
    insights = _run(RestaurantInsightsService(connector).compute_insights("123", date_range))

    assert insights.demo is True
    assert len(connector.calls) == len(DataSource)
    status = insights.configuration_status
    assert status["issue"] == "assembly_failed"
    assert status["error"] == "ValueError: unexpected row shape"
    assert set(status["sourceStatus"]) == {s.value for s in DataSource}


def test_invalid_amount_propagates(make_connector, date_range):
    rows = {DataSource.CAMPAIGNS: [RawCampaign(id="1", name="Broken", cost_micros=-5)]}
    with pytest.raises(InvalidAmount):
        _run(RestaurantInsightsService(make_connector(rows=rows)).compute_insights("123", date_range))


def test_invalid_date_range():
    with pytest.raises(InvalidDateRange):
        DateRange(start=date(2024, 2, 1), end=date(2024, 1, 1))


# ---------------------------------------------------------------------------
# Spend cross-check
# ---------------------------------------------------------------------------

def test_campaign_and_series_spend_agree():
    total = sum_currency(DEMO_CAMPAIGNS, "cost_micros")
    series = demo_time_series(date(2024, 6, 30))

    assert sum_currency(series, "cost_micros") == total
    assert reconcile_spend(total, series) is True


def test_spend_mismatch_is_detected():
    series = demo_time_series(date(2024, 6, 30))
    assert reconcile_spend(Decimal("300.00"), series) is False


def test_per_conversion():
    assert per_conversion(Decimal("324.58"), 89) == Decimal("3.65")
    assert per_conversion(Decimal("10.00"), 0) == Decimal("0.00")


# ---------------------------------------------------------------------------
# Demo dataset
# ---------------------------------------------------------------------------

def test_demo_figures(date_range):
    data = build_demo_insights(date_range).to_dict()

    assert data["demo"] is True
    assert data["accountId"] == "demo"
    assert data["totalSpend"] == 324.58
    assert data["totalConversions"] == 89
    assert data["averageOrderValue"] == 30.0
    assert data["costPerConversion"] == 3.65
    assert data["phoneCallConversions"] == 25
    assert data["websiteConversions"] == 45
    assert data["directionsConversions"] == 19
    assert data["peakHours"] == [{"hour": 12, "orderCount": 45}, {"hour": 18, "orderCount": 67}]
    assert data["averageOrderFrequency"] == 30 / 89
    assert data["localCompetitionShare"] == 0.0
    assert data["sourceStatus"] == {}
    assert data["configurationStatus"]["issue"] == "demo_mode"
    assert len(data["conversionActions"]) == 5
    assert len(data["peakDays"]) == 7


def test_demo_is_deterministic(date_range):
    assert build_demo_insights(date_range).to_dict() == build_demo_insights(date_range).to_dict()


def test_demo_keeps_supplied_configuration_status(date_range):
    status = {"issue": "missing_account_id", "message": "No account"}
    insights = build_demo_insights(date_range, status)
    assert insights.configuration_status == status
