"""Request-scoped trace identifiers.

The request ID and W3C ``traceparent`` of the inbound request are kept in
contextvars so the webhook client can forward them and log lines can carry
them without passing them through every call.
"""

import uuid
from contextvars import ContextVar
from typing import Any

REQUEST_ID_HEADER = "X-Request-ID"
TRACEPARENT_HEADER = "traceparent"

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_trace_parent: ContextVar[str | None] = ContextVar("trace_parent", default=None)


def begin_request(request_id: str | None = None, trace_parent: str | None = None) -> str:
    """Bind identifiers for the current request and return the request ID.

    A fresh UUID is generated when the caller did not send one.
    """
    request_id = request_id or str(uuid.uuid4())
    _request_id.set(request_id)
    _trace_parent.set(trace_parent or None)
    return request_id


def end_request() -> None:
    _request_id.set(None)
    _trace_parent.set(None)


def get_request_id() -> str | None:
    return _request_id.get()


def get_trace_parent() -> str | None:
    return _trace_parent.get()


def outbound_headers() -> dict[str, str]:
    """Headers to forward on outbound HTTP calls."""
    headers: dict[str, str] = {}
    if request_id := _request_id.get():
        headers[REQUEST_ID_HEADER] = request_id
    if trace_parent := _trace_parent.get():
        headers[TRACEPARENT_HEADER] = trace_parent
    return headers


def log_context() -> dict[str, Any]:
    """Bound identifiers as structlog keys."""
    context: dict[str, Any] = {}
    if request_id := _request_id.get():
        context["request_id"] = request_id
    if trace_parent := _trace_parent.get():
        context["trace_parent"] = trace_parent
    return context
