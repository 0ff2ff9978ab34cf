"""
Health check and status endpoints
"""
from fastapi import APIRouter
from datetime import datetime
from app.config import get_settings
from app.api.insights import connector
from app import __version__

settings = get_settings()

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__
    }


@router.get("/status")
async def get_status():
    """Get system status"""
    return {
        "app_name": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "mode": "live" if connector.is_configured() else "demo",
        "connectors": {
            "google_ads": connector.get_status()
        },
        "fetch": {
            "timeout_seconds": settings.fetch_timeout_seconds,
            "retry_attempts": settings.fetch_retry_attempts,
            "default_lookback_days": settings.default_lookback_days
        },
        "timestamp": datetime.utcnow().isoformat()
    }
