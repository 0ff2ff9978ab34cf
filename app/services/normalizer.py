"""
Unit normalization for platform monetary encodings.

Ad platforms report money as "micros" (1,000,000 micros = 1 unit of
currency). Every dollar figure the service returns passes through
``to_currency``; nothing else divides by one million. Aggregates are summed
in micros first and normalized once, so two totals built from the same rows
always agree.
"""
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from numbers import Real
from typing import Any, Iterable

from app.errors import InvalidAmount

MICROS_PER_UNIT = Decimal(1_000_000)
CENTS = Decimal("0.01")


def to_currency(micros: Any) -> Decimal:
    """
    Convert a micros amount to currency, rounded half-up to 2 places.

    Fractional micros are accepted (conversion values arrive as floats).

    Raises:
        InvalidAmount: if the value is negative, NaN, boolean or not a number
    """
    if isinstance(micros, bool) or not isinstance(micros, (Real, Decimal)):
        raise InvalidAmount(micros)
    if isinstance(micros, float) and not math.isfinite(micros):
        raise InvalidAmount(micros)

    try:
        amount = Decimal(str(micros))
    except InvalidOperation:
        raise InvalidAmount(micros)

    if not amount.is_finite() or amount < 0:
        raise InvalidAmount(micros)

    return (amount / MICROS_PER_UNIT).quantize(CENTS, rounding=ROUND_HALF_UP)


def sum_micros(records: Iterable[Any], field: str):
    """Sum a micros field across records without converting units"""
    return sum((getattr(record, field) for record in records), 0)


def sum_currency(records: Iterable[Any], field: str) -> Decimal:
    """Sum a micros field across records and normalize the total once"""
    return to_currency(sum_micros(records, field))


def sum_metric(records: Iterable[Any], field: str) -> float:
    """Sum a plain numeric field (conversions, clicks, ...) across records"""
    return sum((getattr(record, field) for record in records), 0)


def to_percentage(rate: float) -> float:
    """
    Normalize a rate reported either as a fraction (0-1) or a percentage (0-100).

    Values up to 1.0 are treated as fractions. Google Ads reports
    phone-through-rate as a fraction, other sources as a percentage.
    """
    if isinstance(rate, bool) or not isinstance(rate, (Real, Decimal)):
        raise InvalidAmount(rate)
    if math.isnan(rate) or rate < 0:
        raise InvalidAmount(rate)
    if rate <= 1:
        return round(float(rate) * 100, 2)
    return round(float(rate), 2)


def to_micros(amount: float) -> int:
    """Encode a currency amount as micros (for sources that report plain currency)"""
    if isinstance(amount, bool) or not isinstance(amount, (Real, Decimal)):
        raise InvalidAmount(amount)
    if math.isnan(amount) or amount < 0:
        raise InvalidAmount(amount)
    return int((Decimal(str(amount)) * MICROS_PER_UNIT).to_integral_value(rounding=ROUND_HALF_UP))
