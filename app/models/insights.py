"""
Value records for the restaurant insights pipeline.

Raw records keep platform units (micros) exactly as the provider returned
them. Money is normalized only when a record is serialized, through
``app.services.normalizer``.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from app.errors import InvalidDateRange
from app.services.normalizer import to_currency, to_percentage


class DataSource(str, Enum):
    """Independent report types fetched for every insights run"""
    CAMPAIGNS = "campaigns"
    KEYWORDS = "keywords"
    GEOGRAPHIC = "geographic"
    TIME_SERIES = "time_series"
    CONVERSION_ACTIONS = "conversion_actions"
    CALL_INTERACTIONS = "call_interactions"


class ChannelType(str, Enum):
    SEARCH = "SEARCH"
    DISPLAY = "DISPLAY"
    SHOPPING = "SHOPPING"
    VIDEO = "VIDEO"
    PERFORMANCE_MAX = "PERFORMANCE_MAX"
    LOCAL = "LOCAL"
    SMART = "SMART"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "ChannelType":
        name = getattr(value, "name", value)
        try:
            return cls(str(name).upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def label(self) -> str:
        return CHANNEL_TYPE_LABELS[self]


CHANNEL_TYPE_LABELS = {
    ChannelType.SEARCH: "Search Campaign",
    ChannelType.DISPLAY: "Display Campaign",
    ChannelType.SHOPPING: "Shopping Campaign",
    ChannelType.VIDEO: "Video Campaign",
    ChannelType.PERFORMANCE_MAX: "Performance Max Campaign",
    ChannelType.LOCAL: "Local Campaign",
    ChannelType.SMART: "Smart Campaign",
    ChannelType.UNKNOWN: "Campaign Data",
}


class CampaignStatus(str, Enum):
    ENABLED = "ENABLED"
    PAUSED = "PAUSED"
    REMOVED = "REMOVED"
    ENDED = "ENDED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "CampaignStatus":
        name = getattr(value, "name", value)
        try:
            return cls(str(name).upper())
        except ValueError:
            return cls.UNKNOWN


class ConversionCategory(str, Enum):
    PHONE_CALL = "phoneCall"
    WEBSITE = "website"
    DIRECTIONS = "directions"
    OTHER = "other"


class AcquisitionTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


def _money(amount: Decimal) -> float:
    return float(amount)


@dataclass(frozen=True)
class DateRange:
    """Inclusive reporting window"""
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidDateRange(self.start, self.end)

    @classmethod
    def last_n_days(cls, days: int, today: Optional[date] = None) -> "DateRange":
        end = today or date.today()
        return cls(start=end - timedelta(days=days), end=end)

    def to_dict(self) -> Dict[str, str]:
        return {"startDate": self.start.isoformat(), "endDate": self.end.isoformat()}


@dataclass(frozen=True)
class RawCampaign:
    id: str
    name: str
    channel_type: ChannelType = ChannelType.UNKNOWN
    status: CampaignStatus = CampaignStatus.UNKNOWN
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    impressions: int = 0
    clicks: int = 0
    cost_micros: int = 0
    conversions: float = 0.0
    conversion_value_micros: float = 0.0
    ctr: float = 0.0
    cpc_micros: int = 0
    cpa_micros: int = 0
    roas: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaignId": self.id,
            "campaignName": self.name,
            "campaignType": self.channel_type.value,
            "campaignTypeLabel": self.channel_type.label,
            "status": self.status.value,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "cost": _money(to_currency(self.cost_micros)),
            "conversions": self.conversions,
            "conversionValue": _money(to_currency(self.conversion_value_micros)),
            "ctr": self.ctr,
            "cpc": _money(to_currency(self.cpc_micros)),
            "cpa": _money(to_currency(self.cpa_micros)),
            "roas": self.roas,
        }


@dataclass(frozen=True)
class RawKeyword:
    id: str
    text: str
    match_type: str = "UNKNOWN"
    campaign_name: str = ""
    ad_group_name: str = ""
    impressions: int = 0
    clicks: int = 0
    cost_micros: int = 0
    conversions: float = 0.0
    ctr: float = 0.0
    cpc_micros: int = 0
    quality_score: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.text,
            "matchType": self.match_type,
            "campaignName": self.campaign_name,
            "adGroupName": self.ad_group_name,
            "conversions": self.conversions,
            "cost": _money(to_currency(self.cost_micros)),
            "clicks": self.clicks,
            "ctr": self.ctr,
            "cpc": _money(to_currency(self.cpc_micros)),
            "qualityScore": self.quality_score,
        }


@dataclass(frozen=True)
class RawGeo:
    location_name: str
    location_type: str = "Unknown"
    impressions: int = 0
    clicks: int = 0
    cost_micros: int = 0
    conversions: float = 0.0
    ctr: float = 0.0
    cpc_micros: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "locationName": self.location_name,
            "locationType": self.location_type,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "cost": _money(to_currency(self.cost_micros)),
            "conversions": self.conversions,
            "ctr": self.ctr,
            "cpc": _money(to_currency(self.cpc_micros)),
        }


@dataclass(frozen=True)
class TimeSeriesPoint:
    date: date
    impressions: int = 0
    clicks: int = 0
    cost_micros: int = 0
    conversions: float = 0.0
    conversion_value_micros: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "impressions": self.impressions,
            "clicks": self.clicks,
            "cost": _money(to_currency(self.cost_micros)),
            "conversions": self.conversions,
            "conversionValue": _money(to_currency(self.conversion_value_micros)),
        }


@dataclass(frozen=True)
class ConversionAction:
    name: str
    category_code: Optional[int] = None
    conversions: float = 0.0
    conversion_value_micros: float = 0.0
    view_through_conversions: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.category_code,
            "category": self.category_code,
            "conversions": self.conversions,
            "conversionValue": _money(to_currency(self.conversion_value_micros)),
            "viewThroughConversions": self.view_through_conversions,
        }


@dataclass(frozen=True)
class CallInteraction:
    campaign_name: str
    ad_group_name: str = ""
    phone_calls: int = 0
    phone_impressions: int = 0
    phone_through_rate: float = 0.0
    call_type: str = "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaignName": self.campaign_name,
            "adGroupName": self.ad_group_name,
            "phoneCalls": self.phone_calls,
            "phoneImpressions": self.phone_impressions,
            "phoneThroughRate": to_percentage(self.phone_through_rate),
            "callType": self.call_type,
        }


@dataclass(frozen=True)
class PeakDay:
    day: str
    conversions: float
    spend: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "conversions": self.conversions, "spend": _money(self.spend)}


@dataclass(frozen=True)
class PeakHour:
    hour: int
    order_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"hour": self.hour, "orderCount": self.order_count}


@dataclass(frozen=True)
class RestaurantInsights:
    """Consolidated insights for one account over one reporting window"""
    total_spend: Decimal
    total_conversions: float
    average_order_value: Decimal
    phone_call_conversions: float
    website_conversions: float
    directions_conversions: float
    cost_per_conversion: Decimal
    conversion_actions: Tuple[ConversionAction, ...]
    peak_days: Tuple[PeakDay, ...]
    acquisition_trend: AcquisitionTrend
    top_performing_campaigns: Tuple[RawCampaign, ...]
    geographic_hotspots: Tuple[RawGeo, ...]
    seasonal_trends: Tuple[TimeSeriesPoint, ...]
    top_keywords: Tuple[RawKeyword, ...]
    ranked_by: Dict[str, str]
    call_interactions: Tuple[CallInteraction, ...] = ()
    total_phone_calls: int = 0
    # Every row each source returned, unranked
    campaigns: Tuple[RawCampaign, ...] = ()
    keywords: Tuple[RawKeyword, ...] = ()
    locations: Tuple[RawGeo, ...] = ()
    peak_hours: Tuple[PeakHour, ...] = ()
    average_order_frequency: float = 0.0
    local_competition_share: float = 0.0
    demo: bool = False
    configuration_status: Optional[Dict[str, Any]] = None
    source_status: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    date_range: Optional[DateRange] = None
    account_id: Optional[str] = None

    @property
    def top_keywords_used_fallback(self) -> bool:
        return self.ranked_by.get("keywords") != "conversions"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible representation (camelCase keys, money as floats)"""
        data = {
            "demo": self.demo,
            "accountId": self.account_id,
            "dateRange": self.date_range.to_dict() if self.date_range else None,
            "totalSpend": _money(self.total_spend),
            "totalConversions": self.total_conversions,
            "averageOrderValue": _money(self.average_order_value),
            "phoneCallConversions": self.phone_call_conversions,
            "websiteConversions": self.website_conversions,
            "directionsConversions": self.directions_conversions,
            "costPerConversion": _money(self.cost_per_conversion),
            "conversionActions": [a.to_dict() for a in self.conversion_actions],
            "peakHours": [h.to_dict() for h in self.peak_hours],
            "peakDays": [d.to_dict() for d in self.peak_days],
            "averageOrderFrequency": self.average_order_frequency,
            "customerAcquisitionTrend": self.acquisition_trend.value,
            "localCompetitionShare": self.local_competition_share,
            "topPerformingCampaigns": [c.to_dict() for c in self.top_performing_campaigns],
            "geographicHotspots": [g.to_dict() for g in self.geographic_hotspots],
            "seasonalTrends": [p.to_dict() for p in self.seasonal_trends],
            "topKeywords": [k.to_dict() for k in self.top_keywords],
            "topKeywordsRankedBy": self.ranked_by.get("keywords"),
            "topKeywordsUsedFallback": self.top_keywords_used_fallback,
            "rankedBy": dict(self.ranked_by),
            "callInteractions": [c.to_dict() for c in self.call_interactions],
            "totalPhoneCalls": self.total_phone_calls,
            "campaigns": [c.to_dict() for c in self.campaigns],
            "keywords": [k.to_dict() for k in self.keywords],
            "geographic": [g.to_dict() for g in self.locations],
            "timeSeries": [p.to_dict() for p in self.seasonal_trends],
            "sourceStatus": dict(self.source_status),
        }
        if self.configuration_status is not None:
            data["configurationStatus"] = dict(self.configuration_status)
        return data
