"""Error taxonomy for the matching engine."""

from typing import Any


class MatchingError(Exception):
    """Base exception for the matching engine."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/response."""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class MalformedSubjectError(MatchingError):
    """Raised when a candidate/project record lacks identity or has wrong-typed fields."""

    def __init__(self, message: str, field: str | None = None, subject_id: str | None = None, **kwargs):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if subject_id:
            details["subject_id"] = subject_id
        super().__init__(message, error_code="MALFORMED_SUBJECT", details=details, **kwargs)


class InvalidIntentError(MatchingError):
    """Raised when a structured intent or student profile fails validation.

    Callers surface ``user_message`` instead of a server error.
    """

    user_message = "Please refine your search"

    def __init__(self, message: str, errors: list[str] | None = None, **kwargs):
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message, error_code="INVALID_INTENT", details=details, **kwargs)


class PoolRetrievalError(MatchingError):
    """Raised when the external store cannot provide a subject pool."""

    def __init__(self, message: str, operation: str | None = None, **kwargs):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        super().__init__(message, error_code="POOL_RETRIEVAL_ERROR", details=details, **kwargs)


class EnrichmentTimeoutError(MatchingError):
    """Internal: the LLM enrichment call exceeded its time budget."""

    def __init__(self, message: str, timeout: float | None = None, **kwargs):
        details = kwargs.pop("details", {})
        if timeout is not None:
            details["timeout_seconds"] = timeout
        super().__init__(message, error_code="ENRICHMENT_TIMEOUT", details=details, **kwargs)
