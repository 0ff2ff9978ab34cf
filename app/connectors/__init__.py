"""Data Connectors for the Restaurant Insights service"""

from app.connectors.base_connector import BaseConnector

__all__ = [
    "BaseConnector",
]
