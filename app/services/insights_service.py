"""
Restaurant insights service.

Single entry point: compute insights for an account over a date range.
Ordinary upstream trouble never raises to the caller. A missing
configuration or a failure while assembling returns the demo dataset
with a ``configurationStatus`` explaining why. A failing source only empties
its part of the result. Only programmer errors (``InvalidAmount``,
``InvalidDateRange``) propagate.
"""
from typing import Any, Dict, Optional

from app.connectors.base_connector import BaseConnector
from app.errors import AssemblyError, InvalidAmount, NotConfigured
from app.models.insights import DateRange, RestaurantInsights
from app.services.demo_data import DEMO_ACCOUNT_ID, build_demo_insights
from app.services.fetch_orchestrator import FetchReport, fetch_all
from app.services.insights_assembler import assemble_insights
from app.utils.logger import log


class RestaurantInsightsService:
    """Fetches every report source and assembles restaurant insights"""

    def __init__(self, connector: BaseConnector, default_account_id: Optional[str] = None):
        self.connector = connector
        self.default_account_id = default_account_id

    def resolve_account(self, account_id: Optional[str]) -> str:
        """
        Pick the account to report on.

        Raises:
            NotConfigured: provider credentials are missing or no account is known
        """
        if not self.connector.is_configured():
            raise NotConfigured(
                f"{self.connector.name} credentials are not configured",
                issue="missing_credentials",
                missing=self.connector.missing_configuration(),
            )

        account = (account_id or "").strip() or (self.default_account_id or "").strip()
        if not account or account.lower() == DEMO_ACCOUNT_ID:
            raise NotConfigured(
                "No account ID supplied and no default account configured",
                issue="missing_account_id",
            )
        return account

    async def compute_insights(self, account_id: Optional[str], date_range: DateRange) -> RestaurantInsights:
        """Compute insights for ``account_id`` over ``date_range``"""
        try:
            account = self.resolve_account(account_id)
        except NotConfigured as e:
            log.warning(f"Serving demo insights: {e.message}")
            return build_demo_insights(date_range, configuration_status(e))

        log.info(f"Computing insights for account {account} ({date_range.start} to {date_range.end})")
        report = await fetch_all(self.connector, account, date_range)

        try:
            insights = assemble_insights(report, account_id=account, date_range=date_range)
        except InvalidAmount:
            raise
        except Exception as e:
            error = AssemblyError("Real data could not be assembled; showing demo data instead", cause=e)
            log.error(f"Insights assembly failed for account {account}: {error.details.get('cause')}")
            return build_demo_insights(date_range, configuration_status(error, report))

        if report.failures:
            log.info(
                f"Insights for account {account} built from partial data "
                f"({len(report.succeeded)}/{len(report.results)} sources)"
            )
        return insights


def configuration_status(error: Exception, report: Optional[FetchReport] = None) -> Dict[str, Any]:
    """Diagnostic attached to every demo response"""
    if isinstance(error, NotConfigured):
        status = {"issue": error.issue, "message": error.message}
        status.update({k: v for k, v in error.details.items() if k != "issue"})
        return status

    if isinstance(error, AssemblyError):
        status = {
            "issue": "assembly_failed",
            "message": error.message,
            "error": error.details.get("cause"),
        }
        if report is not None:
            status["sourceStatus"] = report.diagnostics()
        return status

    return {"issue": "unknown", "message": str(error)}
