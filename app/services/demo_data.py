"""
Synthetic dataset served when live data cannot be obtained.

The figures are raw records pushed through the same assembly as live data,
so demo totals obey the same invariants (campaign spend equals time-series
spend, category counts add up to the conversion-action list).
"""
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from app.models.insights import (
    CallInteraction,
    CampaignStatus,
    ChannelType,
    ConversionAction,
    DataSource,
    DateRange,
    PeakHour,
    RawCampaign,
    RawGeo,
    RawKeyword,
    RestaurantInsights,
    TimeSeriesPoint,
)
from app.services.fetch_orchestrator import FetchReport, SourceResult
from app.services.insights_assembler import assemble_insights

DEMO_ACCOUNT_ID = "demo"

DEMO_CAMPAIGNS = (
    RawCampaign(
        id="demo-1",
        name="Local Restaurant Ads",
        channel_type=ChannelType.SEARCH,
        status=CampaignStatus.ENABLED,
        start_date="2024-01-01",
        impressions=31870,
        clicks=1530,
        cost_micros=244_580_000,
        conversions=67,
        conversion_value_micros=2_010_000_000,
        ctr=0.048,
        cpc_micros=160_000,
        cpa_micros=3_650_000,
        roas=8.22,
    ),
    RawCampaign(
        id="demo-2",
        name="Weekend Specials",
        channel_type=ChannelType.PERFORMANCE_MAX,
        status=CampaignStatus.ENABLED,
        start_date="2024-03-01",
        impressions=13360,
        clicks=626,
        cost_micros=80_000_000,
        conversions=22,
        conversion_value_micros=660_000_000,
        ctr=0.0469,
        cpc_micros=130_000,
        cpa_micros=3_640_000,
        roas=8.25,
    ),
)

DEMO_KEYWORDS = (
    RawKeyword(id="demo-kw-1", text="restaurant near me", match_type="BROAD",
               campaign_name="Local Restaurant Ads", ad_group_name="Local Intent",
               impressions=12040, clicks=612, cost_micros=98_450_000, conversions=31,
               ctr=0.0508, cpc_micros=160_000, quality_score=8),
    RawKeyword(id="demo-kw-2", text="best pizza delivery", match_type="PHRASE",
               campaign_name="Local Restaurant Ads", ad_group_name="Delivery",
               impressions=9310, clicks=455, cost_micros=71_200_000, conversions=22,
               ctr=0.0489, cpc_micros=160_000, quality_score=7),
    RawKeyword(id="demo-kw-3", text="italian restaurant downtown", match_type="EXACT",
               campaign_name="Local Restaurant Ads", ad_group_name="Local Intent",
               impressions=6120, clicks=301, cost_micros=45_930_000, conversions=14,
               ctr=0.0492, cpc_micros=150_000, quality_score=9),
    RawKeyword(id="demo-kw-4", text="takeout food", match_type="BROAD",
               campaign_name="Local Restaurant Ads", ad_group_name="Delivery",
               impressions=4400, clicks=162, cost_micros=29_000_000, conversions=0,
               ctr=0.0368, cpc_micros=180_000, quality_score=5),
)

DEMO_LOCATIONS = (
    RawGeo(location_name="Downtown", location_type="City", impressions=20110, clicks=980,
           cost_micros=150_000_000, conversions=41, ctr=0.0487, cpc_micros=150_000),
    RawGeo(location_name="Riverside", location_type="City", impressions=14050, clicks=668,
           cost_micros=98_580_000, conversions=28, ctr=0.0475, cpc_micros=150_000),
    RawGeo(location_name="North Hills", location_type="City", impressions=11070, clicks=508,
           cost_micros=76_000_000, conversions=20, ctr=0.0459, cpc_micros=150_000),
)

DEMO_CONVERSION_ACTIONS = (
    ConversionAction(name="Phone Calls from Ads", category_code=11, conversions=15,
                     conversion_value_micros=450_000_000),
    ConversionAction(name="Thank You Page", category_code=3, conversions=30,
                     conversion_value_micros=900_000_000),
    ConversionAction(name="Phone Calls from Website", category_code=11, conversions=10,
                     conversion_value_micros=300_000_000),
    ConversionAction(name="Directions Requests", category_code=18, conversions=19,
                     conversion_value_micros=570_000_000),
    ConversionAction(name="Email Contact", category_code=2, conversions=15,
                     conversion_value_micros=450_000_000),
)

DEMO_CALL_INTERACTIONS = (
    CallInteraction(campaign_name="Local Restaurant Ads", ad_group_name="Local Intent",
                    phone_calls=25, phone_impressions=410, phone_through_rate=0.061,
                    call_type="MOBILE"),
)

DEMO_PEAK_HOURS = (PeakHour(hour=12, order_count=45), PeakHour(hour=18, order_count=67))

# Conversions per weekday (Monday first); four weeks of this plus one
# extra conversion on the final day adds up to the campaign total of 89.
_WEEKDAY_CONVERSIONS = (2, 2, 3, 3, 4, 5, 3)
_SERIES_DAYS = 28
_DAILY_COST_MICROS = 11_590_000
_DAILY_IMPRESSIONS = 1615
_DAILY_CLICKS = 77
_VALUE_PER_CONVERSION_MICROS = 30_000_000


def demo_time_series(end: date) -> List[TimeSeriesPoint]:
    """Four weeks of daily points ending on ``end`` whose totals match DEMO_CAMPAIGNS"""
    total_cost = sum(c.cost_micros for c in DEMO_CAMPAIGNS)
    total_impressions = sum(c.impressions for c in DEMO_CAMPAIGNS)
    total_clicks = sum(c.clicks for c in DEMO_CAMPAIGNS)

    points = []
    for offset in range(_SERIES_DAYS):
        day = end - timedelta(days=_SERIES_DAYS - 1 - offset)
        last = offset == _SERIES_DAYS - 1
        conversions = _WEEKDAY_CONVERSIONS[day.weekday()] + (1 if last else 0)
        remaining = _SERIES_DAYS - 1
        points.append(TimeSeriesPoint(
            date=day,
            impressions=total_impressions - remaining * _DAILY_IMPRESSIONS if last else _DAILY_IMPRESSIONS,
            clicks=total_clicks - remaining * _DAILY_CLICKS if last else _DAILY_CLICKS,
            cost_micros=total_cost - remaining * _DAILY_COST_MICROS if last else _DAILY_COST_MICROS,
            conversions=conversions,
            conversion_value_micros=conversions * _VALUE_PER_CONVERSION_MICROS,
        ))
    return points


def demo_report(end: date) -> FetchReport:
    rows = {
        DataSource.CAMPAIGNS: DEMO_CAMPAIGNS,
        DataSource.KEYWORDS: DEMO_KEYWORDS,
        DataSource.GEOGRAPHIC: DEMO_LOCATIONS,
        DataSource.TIME_SERIES: demo_time_series(end),
        DataSource.CONVERSION_ACTIONS: DEMO_CONVERSION_ACTIONS,
        DataSource.CALL_INTERACTIONS: DEMO_CALL_INTERACTIONS,
    }
    return FetchReport(results={source: SourceResult.success(source, data) for source, data in rows.items()})


def build_demo_insights(
    date_range: Optional[DateRange] = None,
    configuration_status: Optional[Dict[str, Any]] = None,
) -> RestaurantInsights:
    """Synthetic insights flagged ``demo=True`` with the reason attached"""
    end = date_range.end if date_range else date.today()
    return assemble_insights(
        demo_report(end),
        account_id=DEMO_ACCOUNT_ID,
        date_range=date_range,
        demo=True,
        configuration_status=configuration_status or {
            "issue": "demo_mode",
            "message": "Showing demo data",
        },
        peak_hours=DEMO_PEAK_HOURS,
    )
