"""
Request correlation ids.

Each request is tagged with an X-Request-ID: the caller's value when it
looks like an id, a fresh one otherwise. The id is echoed in the response
and attached to every log record emitted while the request is served, so
an error a barista reports can be matched with the server log.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Caller-supplied ids end up in logs; anything else is replaced
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")

_request_id: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Id of the request being served, "" outside a request."""
    return _request_id.get()


def new_request_id() -> str:
    return uuid.uuid4().hex


def accept_request_id(candidate: str | None) -> str:
    if candidate and _VALID_REQUEST_ID.match(candidate):
        return candidate
    return new_request_id()


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = accept_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        token = _request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class CorrelationIdFilter:
    """logging filter setting record.request_id ("-" outside a request)."""

    def filter(self, record) -> bool:
        record.request_id = get_request_id() or "-"
        return True
