"""Exception hierarchy for the legal QA gateway.

Every error raised on purpose by the gateway derives from GatewayError, which
carries an error code and the HTTP status the inbound surface maps it to.
"""

from typing import Any


class GatewayError(Exception):
    """Base class for all gateway errors."""

    error_code: str = "GW_ERR_001"
    http_status: int = 500

    def __init__(self, message: str, *, cause: Exception | None = None, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Client-facing error body. Matches the {"error": ...} shape the UI expects."""
        return {"error": self.message}

    def to_log_dict(self) -> dict[str, Any]:
        """Structured details for server-side logging."""
        result: dict[str, Any] = {
            "type": type(self).__name__,
            "code": self.error_code,
            "message": self.message,
        }
        if self.extra_context:
            result["context"] = self.extra_context
        if self.cause:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        return result


##########################################
############## VALIDATION ################
##########################################


class ValidationError(GatewayError):
    """Malformed inbound request."""

    error_code = "GW_VAL_001"
    http_status = 400


##########################################
############### UPSTREAM #################
##########################################


class UpstreamError(GatewayError):
    """Any failure talking to an external JSON-over-HTTP service."""

    error_code = "GW_UP_001"
    http_status = 502


class UpstreamTimeout(UpstreamError):
    """The upstream call did not finish within its configured timeout."""

    error_code = "GW_UP_002"

    def __init__(self, timeout_s: float, *, url: str = "", cause: Exception | None = None) -> None:
        super().__init__(f"Request timed out ({timeout_s:g}s)", cause=cause, context={"url": url, "timeout_s": timeout_s})
        self.timeout_s = timeout_s


class TransportError(UpstreamError):
    """Connection refused, reset, DNS failure and similar transport faults."""

    error_code = "GW_UP_003"


class UpstreamProtocolError(UpstreamError):
    """The upstream answered, but not with a usable JSON body."""

    error_code = "GW_UP_004"


class UpstreamStatusError(UpstreamProtocolError):
    """The upstream answered with a non-2xx status code."""

    error_code = "GW_UP_005"

    def __init__(self, status_code: int, *, url: str = "") -> None:
        super().__init__(f"Upstream responded with status {status_code}", context={"url": url, "status_code": status_code})
        self.status_code = status_code


##########################################
############### CATALOG ##################
##########################################


class CatalogUnavailable(GatewayError):
    """The document catalog could not be assembled from the vector store."""

    error_code = "GW_CAT_001"
    http_status = 502


##########################################
############## PERSISTENCE ###############
##########################################


class PersistenceError(GatewayError):
    """The query log backend failed to execute an operation."""

    error_code = "GW_DB_001"
    http_status = 500


class QueryLogUnavailable(PersistenceError):
    """The query log backend is not configured or cannot be reached."""

    error_code = "GW_DB_002"
