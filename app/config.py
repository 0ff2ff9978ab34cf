"""
Configuration management for the Restaurant Insights service
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Restaurant Insights"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Google Ads (all optional: missing credentials put the service in demo mode)
    google_ads_client_id: Optional[str] = None
    google_ads_client_secret: Optional[str] = None
    google_ads_developer_token: Optional[str] = None
    google_ads_refresh_token: Optional[str] = None
    google_ads_customer_id: Optional[str] = None
    google_ads_login_customer_id: Optional[str] = None

    # Fetching
    fetch_timeout_seconds: float = 30.0  # Per query attempt
    fetch_retry_attempts: int = 3
    fetch_retry_base_delay: float = 2.0  # seconds
    fetch_retry_max_delay: float = 30.0  # seconds

    # Reporting window used when the caller does not supply one
    default_lookback_days: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def missing_google_ads_credentials(self) -> List[str]:
        """Names of the Google Ads credentials that are not set"""
        required = {
            "GOOGLE_ADS_CLIENT_ID": self.google_ads_client_id,
            "GOOGLE_ADS_CLIENT_SECRET": self.google_ads_client_secret,
            "GOOGLE_ADS_DEVELOPER_TOKEN": self.google_ads_developer_token,
            "GOOGLE_ADS_REFRESH_TOKEN": self.google_ads_refresh_token,
        }
        return [name for name, value in required.items() if not value]

    @property
    def google_ads_configured(self) -> bool:
        return not self.missing_google_ads_credentials


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
