"""Restaurant Insights: consolidated advertising insights for local-service businesses"""

__version__ = "1.0.0"
