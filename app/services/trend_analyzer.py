"""
Time-series trend derivation: weekday performance and acquisition trend
"""
from collections import OrderedDict
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from app.models.insights import AcquisitionTrend, PeakDay, TimeSeriesPoint
from app.services.normalizer import sum_currency, sum_metric

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

TREND_WINDOW_POINTS = 14
GROWTH_THRESHOLD = Decimal("1.1")
DECLINE_THRESHOLD = Decimal("0.9")


def merge_daily_points(points: Iterable[TimeSeriesPoint]) -> List[TimeSeriesPoint]:
    """Collapse rows sharing a date (one per campaign upstream) and sort ascending"""
    by_date: Dict = {}
    for point in points:
        existing = by_date.get(point.date)
        if existing is None:
            by_date[point.date] = point
            continue
        by_date[point.date] = replace(
            existing,
            impressions=existing.impressions + point.impressions,
            clicks=existing.clicks + point.clicks,
            cost_micros=existing.cost_micros + point.cost_micros,
            conversions=existing.conversions + point.conversions,
            conversion_value_micros=existing.conversion_value_micros + point.conversion_value_micros,
        )
    return [by_date[d] for d in sorted(by_date)]


def peak_days(series: Sequence[TimeSeriesPoint]) -> List[PeakDay]:
    """
    Conversions and spend per weekday, best day first.

    Always returns all seven weekdays; days without data report zeros so the
    caller can render a fixed seven-column chart. Ties keep Monday-to-Sunday
    order.
    """
    grouped: "OrderedDict[str, List[TimeSeriesPoint]]" = OrderedDict((day, []) for day in WEEKDAYS)
    for point in series:
        grouped[WEEKDAYS[point.date.weekday()]].append(point)

    days = [
        PeakDay(
            day=day,
            conversions=sum_metric(points, "conversions"),
            spend=sum_currency(points, "cost_micros"),
        )
        for day, points in grouped.items()
    ]
    return sorted(days, key=lambda d: d.conversions, reverse=True)


def acquisition_trend(series: Sequence[TimeSeriesPoint]) -> AcquisitionTrend:
    """
    Compare conversions in the trailing 14 points against the 14 before them.

    Short series are compared as-is: with fewer than 14 points the prior
    window is empty, so any recent conversion reads as increasing.
    """
    recent = series[-TREND_WINDOW_POINTS:]
    prior = series[-2 * TREND_WINDOW_POINTS:-TREND_WINDOW_POINTS]

    recent_conversions = Decimal(str(sum_metric(recent, "conversions")))
    prior_conversions = Decimal(str(sum_metric(prior, "conversions")))

    if recent_conversions > prior_conversions * GROWTH_THRESHOLD:
        return AcquisitionTrend.INCREASING
    if recent_conversions < prior_conversions * DECLINE_THRESHOLD:
        return AcquisitionTrend.DECREASING
    return AcquisitionTrend.STABLE
