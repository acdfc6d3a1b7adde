"""Request-scoped context helpers and request origin resolution."""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"
FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"
UNKNOWN_CLIENT_IP = "0.0.0.0"

_request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
_client_ip_ctx_var: ContextVar[str] = ContextVar("client_ip", default="-")


def resolve_client_ip(
    headers: Mapping[str, str],
    *,
    sentinel: str = UNKNOWN_CLIENT_IP,
) -> str:
    """Return the candidate origin address for a request.

    The first comma separated entry of ``X-Forwarded-For`` wins, then
    ``X-Real-IP``, then ``sentinel``. Header lookup is case-insensitive when
    ``headers`` is a Starlette ``Headers`` object; plain mappings should use
    lower-case keys.
    """

    forwarded_for = headers.get(FORWARDED_FOR_HEADER) or ""
    candidate = forwarded_for.split(",")[0].strip()
    if candidate:
        return candidate
    real_ip = (headers.get(REAL_IP_HEADER) or "").strip()
    if real_ip:
        return real_ip
    return sentinel


def get_request_id() -> str:
    """Return the request identifier for the current execution context."""

    return _request_id_ctx_var.get()


def bind_request_id(request_id: str) -> Token[str]:
    """Bind a request identifier to the current execution context."""

    return _request_id_ctx_var.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id_ctx_var.reset(token)


def clear_request_id() -> None:
    """Explicitly clear any request identifier from the current context."""

    _request_id_ctx_var.set("-")


def get_client_ip() -> str:
    """Return the origin address bound to the current request, or ``-``."""

    return _client_ip_ctx_var.get()


def bind_client_ip(client_ip: str) -> Token[str]:
    return _client_ip_ctx_var.set(client_ip)


def reset_client_ip(token: Token[str]) -> None:
    _client_ip_ctx_var.reset(token)


__all__ = [
    "FORWARDED_FOR_HEADER",
    "REAL_IP_HEADER",
    "REQUEST_ID_HEADER",
    "UNKNOWN_CLIENT_IP",
    "bind_client_ip",
    "bind_request_id",
    "clear_request_id",
    "get_client_ip",
    "get_request_id",
    "reset_client_ip",
    "reset_request_id",
    "resolve_client_ip",
]
