"""Error taxonomy for report requests and report generation.

Errors raised before a job exists are surfaced to the caller with their
``status_code``. Errors raised inside the pipeline never reach a request;
they end up as the job's ``error_message`` with status FAILED.
"""


class ReportError(Exception):
    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(ReportError):
    """Missing or malformed request fields."""

    status_code = 400


class AccessDenied(ReportError):
    """Caller is not an active member of the referenced company."""

    status_code = 403


class EntitlementRequired(ReportError):
    """Premium report type or scheduling without the advanced-reporting plan."""

    status_code = 403


class InvalidSchedule(ReportError):
    status_code = 400


class ReportNotFound(ReportError):
    status_code = 404


class ScopeNotFound(ReportError):
    """Aggregation could not resolve the company or project of a scope."""

    status_code = 404


class RenderFailure(ReportError):
    pass


class ArtifactWriteFailure(ReportError):
    pass
