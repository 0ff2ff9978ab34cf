"""
Restaurant insights endpoints
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from app.config import get_settings
from app.connectors.google_ads_connector import GoogleAdsConnector
from app.errors import InvalidDateRange
from app.models.insights import DateRange
from app.services.demo_data import build_demo_insights
from app.services.insights_service import RestaurantInsightsService
from app.utils.logger import log

settings = get_settings()

router = APIRouter(prefix="/insights", tags=["insights"])

connector = GoogleAdsConnector()
insights_service = RestaurantInsightsService(connector, settings.google_ads_customer_id)


def resolve_date_range(
    start_date: Optional[date],
    end_date: Optional[date],
    days: Optional[int],
) -> DateRange:
    """Explicit dates win; otherwise the last ``days`` (or the configured default) up to today"""
    end = end_date or date.today()
    if start_date is not None:
        return DateRange(start=start_date, end=end)
    return DateRange.last_n_days(days or settings.default_lookback_days, today=end)


@router.get("/restaurant")
async def get_restaurant_insights(
    customer_id: Optional[str] = Query(None, description="Google Ads customer ID (defaults to configured account)"),
    start_date: Optional[date] = Query(None, description="Start of the reporting window (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="End of the reporting window (YYYY-MM-DD)"),
    days: Optional[int] = Query(None, ge=1, le=365, description="Lookback window when no start date is given"),
):
    """
    Business insights for a restaurant advertiser

    Returns demo data (``demo: true``) with a ``configurationStatus`` when
    credentials or account are missing, or when live data could not be
    assembled.
    """
    try:
        date_range = resolve_date_range(start_date, end_date, days)
    except InvalidDateRange as e:
        log.warning(f"Rejected insights request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)

    insights = await insights_service.compute_insights(customer_id, date_range)
    return insights.to_dict()


@router.get("/restaurant/demo")
async def get_demo_insights(days: int = Query(30, ge=1, le=365)):
    """Demo insights, without touching the ads provider"""
    return build_demo_insights(DateRange.last_n_days(days)).to_dict()
