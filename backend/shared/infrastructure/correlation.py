"""
Request correlation.

Each HTTP request gets an id, taken from the X-Request-ID header when the
client sends a usable one. The id is bound to a context variable for the
lifetime of the request so every log line written while a backup, restore
or reset runs can be traced back to the request that started it.
"""

import re
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied ids end up in log lines; accept only plain tokens
_ACCEPTED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Id of the request being handled, or "" outside a request."""
    return request_id_var.get()


def resolve_request_id(header_value: str | None) -> str:
    """The client's id when it is a plain token, otherwise a fresh uuid4."""
    if header_value and _ACCEPTED_REQUEST_ID.match(header_value):
        return header_value
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of the request and echo it back."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class CorrelationIdFilter:
    """Logging filter setting ``record.request_id`` ("-" outside a request)."""

    def filter(self, record) -> bool:
        record.request_id = get_request_id() or "-"
        return True
