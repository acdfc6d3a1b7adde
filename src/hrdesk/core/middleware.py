"""Application middleware implementations."""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .context import (
    REQUEST_ID_HEADER,
    UNKNOWN_CLIENT_IP,
    bind_client_ip,
    bind_request_id,
    reset_client_ip,
    reset_request_id,
    resolve_client_ip,
)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a correlation id and the resolved client address to each request."""

    def __init__(  # type: ignore[override]
        self,
        app,
        header_name: str = REQUEST_ID_HEADER,
        ip_sentinel: str = UNKNOWN_CLIENT_IP,
    ):
        super().__init__(app)
        self._header_name = header_name
        self._ip_sentinel = ip_sentinel

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get(self._header_name) or str(uuid.uuid4())
        client_ip = resolve_client_ip(request.headers, sentinel=self._ip_sentinel)
        request.state.request_id = request_id
        request.state.client_ip = client_ip
        request_token = bind_request_id(request_id)
        ip_token = bind_client_ip(client_ip)
        try:
            response = await call_next(request)
        finally:
            reset_client_ip(ip_token)
            reset_request_id(request_token)
        response.headers.setdefault(self._header_name, request_id)
        return response


__all__ = ["RequestContextMiddleware"]
