"""
Request ID middleware.

Takes ``X-Request-ID`` from the incoming request (or generates one),
exposes it to log records through ``correlation_id_var`` and echoes it on
the response.
"""

import uuid
from collections.abc import Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from contactbook.shared.logging import correlation_id_var

REQUEST_ID_HEADER = "X-Request-ID"


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request and its log records."""

    def __init__(
        self,
        app: Any,
        header_name: str = REQUEST_ID_HEADER,
        generator: Callable[[], str] = generate_request_id,
    ) -> None:
        super().__init__(app)
        self.header_name = header_name
        self.generator = generator

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(self.header_name) or self.generator()
        token = correlation_id_var.set(request_id)
        try:
            response = await call_next(request)
            response.headers[self.header_name] = request_id
            return response
        finally:
            correlation_id_var.reset(token)
