"""Trade Hub error hierarchy."""

from typing import Any


class TradeHubError(Exception):
    """Base exception for Trade Hub errors."""

    code = "TRADE_HUB_INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(TradeHubError):
    """Malformed input."""

    code = "TRADE_HUB_INVALID_REQUEST"
    status_code = 400


class NotFoundError(TradeHubError):
    """Unknown identifier on read or update."""

    code = "TRADE_HUB_NOT_FOUND"
    status_code = 404


class PersistenceError(TradeHubError):
    """Snapshot or backup could not be read or written.

    The in-memory aggregate may already hold the change that failed to
    reach disk.
    """

    code = "TRADE_HUB_PERSISTENCE_FAILURE"
    status_code = 500


class RelayUnavailableError(TradeHubError):
    """Automation webhook unreachable or misbehaving.

    Raised by the webhook client only; the relay turns it into a local
    fallback result.
    """

    code = "TRADE_HUB_RELAY_UNAVAILABLE"
    status_code = 502

    def __init__(
        self,
        message: str,
        event: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details={**(details or {}), "event": event})
        self.event = event


class InternalError(TradeHubError):
    """Internal server error."""

    code = "TRADE_HUB_INTERNAL_ERROR"
    status_code = 500


ERROR_STATUS_MAP: dict[type[TradeHubError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    PersistenceError: 500,
    RelayUnavailableError: 502,
    InternalError: 500,
}


def get_status_code(error: TradeHubError) -> int:
    """Get HTTP status code for error."""
    return ERROR_STATUS_MAP.get(type(error), 500)
