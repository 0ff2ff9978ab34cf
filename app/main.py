"""
Restaurant Insights
Main FastAPI application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.config import get_settings
from app.utils.logger import log
from app import __version__

# Import routers
from app.api import health, insights

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")

    if settings.google_ads_configured:
        log.info("Google Ads credentials found; serving live insights")
    else:
        missing = ", ".join(settings.missing_google_ads_credentials)
        log.warning(f"Google Ads not configured (missing {missing}); serving demo insights")

    yield

    # Shutdown
    log.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="""
    Business insights for restaurant advertisers

    Aggregates Google Ads reporting into one payload:
    - Spend, conversions, average order value and cost per conversion
    - Phone call / website / directions conversion split
    - Peak weekdays and customer acquisition trend
    - Top campaigns, keywords and locations
    - Call extension performance

    Falls back to a flagged demo dataset when the account is not configured.
    """,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(insights.router)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "app": settings.app_name,
        "version": __version__,
        "description": "Business insights for restaurant advertisers",
        "docs": "/docs",
        "health": "/health",
        "status": "/status",
        "endpoints": {
            "restaurant_insights": "GET /insights/restaurant",
            "restaurant_demo": "GET /insights/restaurant/demo"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
