"""Request ID middleware for ProjectHost.

Each request gets an id, taken from an incoming X-Request-ID header when the
caller (or a proxy) supplies one, otherwise a fresh UUID4. It lives in a
ContextVar for the duration of the request, is stamped on every log record
by RequestIDLogFilter, and is echoed back as the X-Request-ID header.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# Lets services and repositories read the current request id without
# needing the Request object.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_MAX_INCOMING_ID_LENGTH = 128


def get_request_id() -> str:
    return request_id_var.get()


class RequestIDLogFilter(logging.Filter):
    """Adds `request_id` to every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        incoming = request.headers.get("X-Request-ID", "")
        if incoming and len(incoming) <= _MAX_INCOMING_ID_LENGTH:
            req_id = incoming
        else:
            req_id = str(uuid.uuid4())
        request_id_var.set(req_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = req_id
        return response
