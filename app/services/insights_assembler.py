"""
Composition of fetched report rows into a RestaurantInsights aggregate.

Everything here is a pure function of the fetch report. Money is summed in
micros and normalized once through the normalizer, so campaign totals and
time-series totals built from the same rows agree.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Optional, Sequence

from app.models.insights import (
    ConversionCategory,
    DataSource,
    DateRange,
    PeakHour,
    RestaurantInsights,
)
from app.services.conversion_classifier import tally_conversions
from app.services.fetch_orchestrator import FetchReport
from app.services.normalizer import CENTS, sum_currency, sum_metric
from app.services.ranking import select_top
from app.services.trend_analyzer import acquisition_trend, merge_daily_points, peak_days
from app.utils.logger import log

TOP_CAMPAIGNS_LIMIT = 5
TOP_LOCATIONS_LIMIT = 10
TOP_KEYWORDS_LIMIT = 10

# Orders per month approximation used for average order frequency
ORDER_FREQUENCY_DAYS = 30

# Campaign vs. time-series spend may differ by per-row rounding only
SPEND_TOLERANCE = Decimal("0.01")


def per_conversion(amount: Decimal, conversions: float) -> Decimal:
    """Currency amount per conversion; zero when nothing converted"""
    if conversions <= 0:
        return Decimal("0.00")
    return (amount / Decimal(str(conversions))).quantize(CENTS, rounding=ROUND_HALF_UP)


def _by_conversions(entity: Any) -> float:
    return entity.conversions


def _by_cost(entity: Any) -> int:
    return entity.cost_micros


def reconcile_spend(total_spend: Decimal, series: Sequence[Any]) -> bool:
    """Check campaign spend against time-series spend; log when they drift apart"""
    series_spend = sum_currency(series, "cost_micros")
    if abs(series_spend - total_spend) > SPEND_TOLERANCE:
        log.warning(
            f"Spend mismatch: campaigns report ${total_spend:,.2f}, "
            f"time series reports ${series_spend:,.2f}"
        )
        return False
    return True


def assemble_insights(
    report: FetchReport,
    account_id: Optional[str] = None,
    date_range: Optional[DateRange] = None,
    demo: bool = False,
    configuration_status: Optional[Dict[str, Any]] = None,
    peak_hours: Iterable[PeakHour] = (),
) -> RestaurantInsights:
    """Build the insights aggregate from whatever sources succeeded"""
    campaigns = report.rows(DataSource.CAMPAIGNS)
    keywords = report.rows(DataSource.KEYWORDS)
    locations = report.rows(DataSource.GEOGRAPHIC)
    series = merge_daily_points(report.rows(DataSource.TIME_SERIES))
    actions = report.rows(DataSource.CONVERSION_ACTIONS)
    calls = report.rows(DataSource.CALL_INTERACTIONS)

    total_spend = sum_currency(campaigns, "cost_micros")
    total_conversions = sum_metric(campaigns, "conversions")
    total_conversion_value = sum_currency(campaigns, "conversion_value_micros")

    if campaigns and series:
        reconcile_spend(total_spend, series)

    by_category = tally_conversions(actions)

    top_campaigns, campaigns_fallback = select_top(campaigns, TOP_CAMPAIGNS_LIMIT, _by_conversions, _by_cost)
    hotspots, locations_fallback = select_top(locations, TOP_LOCATIONS_LIMIT, _by_conversions, _by_cost)
    top_keywords, keywords_fallback = select_top(keywords, TOP_KEYWORDS_LIMIT, _by_conversions, _by_cost)

    ranked_by = {
        "campaigns": "cost" if campaigns_fallback else "conversions",
        "keywords": "cost" if keywords_fallback else "conversions",
        "locations": "cost" if locations_fallback else "conversions",
    }
    if keywords_fallback and keywords:
        log.info("No keyword has conversions; ranking top keywords by cost")

    return RestaurantInsights(
        total_spend=total_spend,
        total_conversions=total_conversions,
        average_order_value=per_conversion(total_conversion_value, total_conversions),
        phone_call_conversions=by_category[ConversionCategory.PHONE_CALL],
        website_conversions=by_category[ConversionCategory.WEBSITE],
        directions_conversions=by_category[ConversionCategory.DIRECTIONS],
        cost_per_conversion=per_conversion(total_spend, total_conversions),
        conversion_actions=tuple(actions),
        peak_days=tuple(peak_days(series)),
        acquisition_trend=acquisition_trend(series),
        top_performing_campaigns=tuple(top_campaigns),
        geographic_hotspots=tuple(hotspots),
        seasonal_trends=tuple(series),
        top_keywords=tuple(top_keywords),
        ranked_by=ranked_by,
        call_interactions=tuple(calls),
        total_phone_calls=sum_metric(calls, "phone_calls"),
        campaigns=tuple(campaigns),
        keywords=tuple(keywords),
        locations=tuple(locations),
        peak_hours=tuple(peak_hours),
        average_order_frequency=ORDER_FREQUENCY_DAYS / total_conversions if total_conversions > 0 else 0.0,
        demo=demo,
        configuration_status=configuration_status,
        source_status={} if demo else report.diagnostics(),
        date_range=date_range,
        account_id=account_id,
    )
