"""
CallBoard Backend — Request ID Middleware
===========================================

What:  Gives every request a correlation ID and echoes it in X-Request-ID.
How:   Reuses a client-supplied X-Request-ID when it looks sane, otherwise
       generates a short one. The ID lives in a ContextVar so loggers and the
       exception handlers can read it without access to the Request.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Longer client IDs are replaced rather than truncated
MAX_REQUEST_ID_LENGTH = 64

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(header_value: str) -> str:
    """Accept a printable client ID up to MAX_REQUEST_ID_LENGTH chars, else mint one."""
    candidate = (header_value or "").strip()
    if not candidate or len(candidate) > MAX_REQUEST_ID_LENGTH or not candidate.isprintable():
        return _new_request_id()
    return candidate


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        # Not reset afterwards: the catch-all 500 handler runs outside this
        # middleware and still needs the ID
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
