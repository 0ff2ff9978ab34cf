"""
Google Ads data connector
Fetches the six report types behind restaurant insights

Rows keep Google Ads units: cost stays in micros and is normalized
downstream. Conversion value arrives in currency and is encoded as micros
so every money field shares one unit.
"""
from typing import Any, List, Optional
import asyncio
import threading
from datetime import date
from google.ads.googleads.client import GoogleAdsClient
from app.connectors.base_connector import BaseConnector
from app.config import get_settings
from app.models.insights import (
    CallInteraction,
    CampaignStatus,
    ChannelType,
    ConversionAction,
    DateRange,
    RawCampaign,
    RawGeo,
    RawKeyword,
    TimeSeriesPoint,
)
from app.services.normalizer import to_micros
from app.services.trend_analyzer import merge_daily_points
from app.utils.logger import log

settings = get_settings()

COUNTRY_NAMES = {
    "2840": "United States",
    "2124": "Canada",
    "2826": "United Kingdom",
    "2276": "Germany",
    "2250": "France",
    "2380": "Italy",
    "2724": "Spain",
    "2036": "Australia",
    "2392": "Japan",
    "2156": "China",
    "2484": "Mexico",
    "2076": "Brazil",
    "2356": "India",
}

ACTIVE_CAMPAIGNS = "campaign.status IN ('ENABLED', 'PAUSED')"


def country_name(criterion_id: Any) -> str:
    return COUNTRY_NAMES.get(str(criterion_id), f"Country ID: {criterion_id}")


def _enum_name(value: Any, default: str = "UNKNOWN") -> str:
    name = getattr(value, "name", None)
    return name if name else default


class GoogleAdsConnector(BaseConnector):
    """Connector for Google Ads platform"""

    RETRY_MAX_ATTEMPTS = settings.fetch_retry_attempts
    RETRY_BASE_DELAY = settings.fetch_retry_base_delay
    RETRY_MAX_DELAY = settings.fetch_retry_max_delay
    REQUEST_TIMEOUT = settings.fetch_timeout_seconds

    def __init__(self):
        super().__init__("Google Ads")
        self.client: Optional[GoogleAdsClient] = None
        self._client_lock = threading.Lock()

    def is_configured(self) -> bool:
        return settings.google_ads_configured

    def missing_configuration(self) -> List[str]:
        return settings.missing_google_ads_credentials

    def connect(self) -> GoogleAdsClient:
        """Create the Google Ads client on first use (safe to call from worker threads)"""
        if self.client is not None:
            return self.client

        with self._client_lock:
            if self.client is None:
                self.client = self._load_client()
        return self.client

    def _load_client(self) -> GoogleAdsClient:
        credentials = {
            "developer_token": settings.google_ads_developer_token,
            "client_id": settings.google_ads_client_id,
            "client_secret": settings.google_ads_client_secret,
            "refresh_token": settings.google_ads_refresh_token,
            "use_proto_plus": True,
        }

        if settings.google_ads_login_customer_id:
            credentials["login_customer_id"] = settings.google_ads_login_customer_id.replace("-", "")

        client = GoogleAdsClient.load_from_dict(credentials)
        log.info("Connected to Google Ads API")
        return client

    def _format_date(self, value: date) -> str:
        """Format date to Google Ads date string"""
        return value.strftime("%Y-%m-%d")

    def _date_filter(self, date_range: DateRange) -> str:
        return (
            f"segments.date BETWEEN '{self._format_date(date_range.start)}' "
            f"AND '{self._format_date(date_range.end)}'"
        )

    def _search_sync(self, account_id: str, query: str) -> List[Any]:
        ga_service = self.connect().get_service("GoogleAdsService")
        return list(ga_service.search(customer_id=account_id.replace("-", ""), query=query))

    async def _search(self, account_id: str, query: str) -> List[Any]:
        # The client is blocking; run it off the event loop so sources overlap
        return await asyncio.to_thread(self._search_sync, account_id, query)

    async def fetch_campaigns(self, account_id: str, date_range: DateRange) -> List[RawCampaign]:
        """Fetch campaign performance data"""
        query = f"""
            SELECT
                campaign.id,
                campaign.name,
                campaign.advertising_channel_type,
                campaign.status,
                campaign.start_date,
                campaign.end_date,
                metrics.impressions,
                metrics.clicks,
                metrics.cost_micros,
                metrics.conversions,
                metrics.conversions_value,
                metrics.ctr,
                metrics.average_cpc,
                metrics.cost_per_conversion,
                metrics.value_per_conversion
            FROM campaign
            WHERE {self._date_filter(date_range)}
                AND {ACTIVE_CAMPAIGNS}
            ORDER BY metrics.cost_micros DESC
        """

        campaigns = []
        for row in await self._search(account_id, query):
            campaigns.append(RawCampaign(
                id=str(row.campaign.id),
                name=row.campaign.name,
                channel_type=ChannelType.parse(row.campaign.advertising_channel_type),
                status=CampaignStatus.parse(row.campaign.status),
                start_date=row.campaign.start_date or None,
                end_date=row.campaign.end_date or None,
                impressions=row.metrics.impressions or 0,
                clicks=row.metrics.clicks or 0,
                cost_micros=row.metrics.cost_micros or 0,
                conversions=row.metrics.conversions or 0.0,
                conversion_value_micros=to_micros(row.metrics.conversions_value or 0.0),
                ctr=row.metrics.ctr or 0.0,
                cpc_micros=int(row.metrics.average_cpc or 0),
                cpa_micros=int(row.metrics.cost_per_conversion or 0),
                roas=row.metrics.value_per_conversion or 0.0,
            ))
        return campaigns

    async def fetch_keywords(self, account_id: str, date_range: DateRange) -> List[RawKeyword]:
        """Fetch keyword performance data"""
        query = f"""
            SELECT
                ad_group_criterion.criterion_id,
                ad_group_criterion.keyword.text,
                ad_group_criterion.keyword.match_type,
                ad_group_criterion.quality_info.quality_score,
                campaign.name,
                ad_group.name,
                metrics.impressions,
                metrics.clicks,
                metrics.cost_micros,
                metrics.conversions,
                metrics.ctr,
                metrics.average_cpc
            FROM keyword_view
            WHERE {self._date_filter(date_range)}
                AND ad_group_criterion.status = 'ENABLED'
                AND ad_group.status = 'ENABLED'
                AND {ACTIVE_CAMPAIGNS}
            ORDER BY metrics.cost_micros DESC
            LIMIT 100
        """

        keywords = []
        for row in await self._search(account_id, query):
            criterion = row.ad_group_criterion
            keywords.append(RawKeyword(
                id=str(criterion.criterion_id),
                text=criterion.keyword.text,
                match_type=_enum_name(criterion.keyword.match_type),
                campaign_name=row.campaign.name,
                ad_group_name=row.ad_group.name,
                impressions=row.metrics.impressions or 0,
                clicks=row.metrics.clicks or 0,
                cost_micros=row.metrics.cost_micros or 0,
                conversions=row.metrics.conversions or 0.0,
                ctr=row.metrics.ctr or 0.0,
                cpc_micros=int(row.metrics.average_cpc or 0),
                quality_score=criterion.quality_info.quality_score or None,
            ))
        return keywords

    async def fetch_geographic(self, account_id: str, date_range: DateRange) -> List[RawGeo]:
        """Fetch performance by country of the user's location"""
        query = f"""
            SELECT
                geographic_view.country_criterion_id,
                geographic_view.location_type,
                metrics.impressions,
                metrics.clicks,
                metrics.cost_micros,
                metrics.conversions,
                metrics.ctr,
                metrics.average_cpc
            FROM geographic_view
            WHERE {self._date_filter(date_range)}
                AND {ACTIVE_CAMPAIGNS}
            ORDER BY metrics.conversions DESC
            LIMIT 50
        """

        locations = []
        for row in await self._search(account_id, query):
            view = row.geographic_view
            locations.append(RawGeo(
                location_name=country_name(view.country_criterion_id),
                location_type=_enum_name(view.location_type, "Unknown"),
                impressions=row.metrics.impressions or 0,
                clicks=row.metrics.clicks or 0,
                cost_micros=row.metrics.cost_micros or 0,
                conversions=row.metrics.conversions or 0.0,
                ctr=row.metrics.ctr or 0.0,
                cpc_micros=int(row.metrics.average_cpc or 0),
            ))
        return locations

    async def fetch_time_series(self, account_id: str, date_range: DateRange) -> List[TimeSeriesPoint]:
        """Fetch daily totals (one row per campaign per day, merged by date)"""
        query = f"""
            SELECT
                segments.date,
                metrics.impressions,
                metrics.clicks,
                metrics.cost_micros,
                metrics.conversions,
                metrics.conversions_value
            FROM campaign
            WHERE {self._date_filter(date_range)}
                AND {ACTIVE_CAMPAIGNS}
            ORDER BY segments.date ASC
        """

        points = [
            TimeSeriesPoint(
                date=date.fromisoformat(row.segments.date),
                impressions=row.metrics.impressions or 0,
                clicks=row.metrics.clicks or 0,
                cost_micros=row.metrics.cost_micros or 0,
                conversions=row.metrics.conversions or 0.0,
                conversion_value_micros=to_micros(row.metrics.conversions_value or 0.0),
            )
            for row in await self._search(account_id, query)
        ]
        return merge_daily_points(points)

    async def fetch_conversion_actions(self, account_id: str, date_range: DateRange) -> List[ConversionAction]:
        """Fetch conversions split by conversion action"""
        query = f"""
            SELECT
                campaign.name,
                metrics.conversions,
                metrics.conversions_value,
                metrics.view_through_conversions,
                segments.conversion_action_name,
                segments.conversion_action_category
            FROM campaign
            WHERE {self._date_filter(date_range)}
                AND {ACTIVE_CAMPAIGNS}
                AND metrics.conversions > 0
            ORDER BY metrics.conversions DESC
            LIMIT 20
        """

        actions = []
        for row in await self._search(account_id, query):
            category = row.segments.conversion_action_category
            actions.append(ConversionAction(
                name=row.segments.conversion_action_name or "Unknown",
                category_code=int(category) if category is not None else None,
                conversions=row.metrics.conversions or 0.0,
                conversion_value_micros=to_micros(row.metrics.conversions_value or 0.0),
                view_through_conversions=row.metrics.view_through_conversions or 0.0,
            ))
        return actions

    async def fetch_call_interactions(self, account_id: str, date_range: DateRange) -> List[CallInteraction]:
        """Fetch call-extension performance"""
        query = f"""
            SELECT
                campaign.name,
                ad_group.name,
                metrics.phone_calls,
                metrics.phone_through_rate,
                metrics.phone_impressions,
                segments.call_type
            FROM ad_group
            WHERE {self._date_filter(date_range)}
                AND metrics.phone_calls > 0
            ORDER BY metrics.phone_calls DESC
            LIMIT 20
        """

        calls = []
        for row in await self._search(account_id, query):
            calls.append(CallInteraction(
                campaign_name=row.campaign.name or "Unknown Campaign",
                ad_group_name=row.ad_group.name or "Unknown Ad Group",
                phone_calls=row.metrics.phone_calls or 0,
                phone_impressions=row.metrics.phone_impressions or 0,
                phone_through_rate=row.metrics.phone_through_rate or 0.0,
                call_type=_enum_name(row.segments.call_type, "Unknown"),
            ))
        return calls
