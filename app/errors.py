"""
Error classes for the insights pipeline.

Hierarchy:
    InsightsError
    ├── InvalidAmount        (normalizer contract violation, propagates)
    ├── InvalidDateRange     (caller passed start > end, propagates)
    ├── SourceFetchError     (one data source failed, recovered locally)
    ├── NotConfigured        (no credentials / account, routes to demo data)
    └── AssemblyError        (composition failed after fetch, routes to demo data)
"""


class InsightsError(Exception):
    """Base exception for all insights pipeline errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


class InvalidAmount(InsightsError):
    """A monetary amount could not be normalized (negative or not a number)."""

    def __init__(self, value):
        super().__init__(
            f"Invalid micros amount: {value!r}",
            code="INVALID_AMOUNT", details={"value": repr(value)},
        )


class InvalidDateRange(InsightsError):
    """Reporting window whose start falls after its end."""

    def __init__(self, start, end):
        super().__init__(
            f"Start date {start} is after end date {end}",
            code="INVALID_DATE_RANGE", details={"start": str(start), "end": str(end)},
        )


class SourceFetchError(InsightsError):
    """A single data source failed (timeout, permission denial, bad response)."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(
            f"Fetch failed for {source}: {reason}",
            code="SOURCE_FETCH_FAILED", details={"source": source, "reason": reason},
        )


class NotConfigured(InsightsError):
    """Credentials or account identifier are not available."""

    def __init__(self, message: str, issue: str = "not_configured", **details):
        self.issue = issue
        super().__init__(message, code="NOT_CONFIGURED", details={"issue": issue, **details})


class AssemblyError(InsightsError):
    """Unexpected failure while composing the insights aggregate."""

    def __init__(self, message: str, cause: Exception = None):
        self.cause = cause
        details = {"cause": f"{type(cause).__name__}: {cause}"} if cause else {}
        super().__init__(message, code="ASSEMBLY_FAILED", details=details)
