"""Value records for the restaurant insights pipeline"""

from app.models.insights import (
    DataSource,
    ChannelType,
    CampaignStatus,
    ConversionCategory,
    AcquisitionTrend,
    DateRange,
    RawCampaign,
    RawKeyword,
    RawGeo,
    TimeSeriesPoint,
    ConversionAction,
    CallInteraction,
    PeakDay,
    PeakHour,
    RestaurantInsights
)
