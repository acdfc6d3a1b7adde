from __future__ import annotations

import logging

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from hrdesk.core.logging import RequestContextFilter
from hrdesk.errors import AccessDeniedError, ApplicationError, ServerError
from hrdesk.main import create_app

pytestmark = pytest.mark.asyncio


@pytest.fixture()
def bare_app():
    return create_app()


def _client(application) -> AsyncClient:
    transport = ASGITransport(app=application, raise_app_exceptions=False)
    return AsyncClient(transport=transport, base_url="http://test")


async def test_application_error_response_schema(bare_app) -> None:
    @bare_app.get("/error/application")
    async def trigger_application_error() -> None:  # pragma: no cover - defined in test
        raise ApplicationError(
            "Example failure",
            code="example_error",
            status_code=status.HTTP_418_IM_A_TEAPOT,
            details={"foo": "bar"},
        )

    async with _client(bare_app) as client:
        response = await client.get("/error/application")

    assert response.status_code == status.HTTP_418_IM_A_TEAPOT
    request_id = response.headers["X-Request-ID"]
    assert response.json() == {
        "code": "example_error",
        "message": "Example failure",
        "details": {"request_id": request_id, "foo": "bar"},
    }


async def test_access_denied_carries_the_rejected_address(bare_app) -> None:
    @bare_app.get("/error/ip")
    async def trigger_access_denied() -> None:  # pragma: no cover - defined in test
        raise AccessDeniedError(ip="198.51.100.3")

    async with _client(bare_app) as client:
        response = await client.get("/error/ip", headers={"X-Request-ID": "fixed-id"})

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {
        "code": "ip_not_allowed",
        "message": "IP address not allowed",
        "details": {"request_id": "fixed-id", "ip": "198.51.100.3"},
    }


async def test_validation_error_response_schema(bare_app) -> None:
    class ExamplePayload(BaseModel):
        name: str

    @bare_app.post("/error/validation")
    async def create_item(_: ExamplePayload) -> None:  # pragma: no cover - defined in test
        return None

    async with _client(bare_app) as client:
        response = await client.post("/error/validation", json={})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["message"] == "Request validation failed."
    assert payload["details"]["errors"]
    assert payload["details"]["request_id"] == response.headers["X-Request-ID"]


async def test_not_found_error_response_schema(bare_app) -> None:
    async with _client(bare_app) as client:
        response = await client.get("/error/not-found")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    payload = response.json()
    assert payload["code"] == "not_found"
    assert payload["details"]["request_id"] == response.headers["X-Request-ID"]


async def test_integrity_error_response_schema(bare_app) -> None:
    @bare_app.get("/error/database")
    async def trigger_integrity_error() -> None:  # pragma: no cover - defined in test
        raise IntegrityError("statement", {}, Exception("constraint"))

    async with _client(bare_app) as client:
        response = await client.get("/error/database")

    assert response.status_code == status.HTTP_409_CONFLICT
    payload = response.json()
    assert payload["code"] == "db_integrity_error"
    assert payload["message"] == "Database integrity violation."


async def test_unhandled_error_hides_internal_details(bare_app) -> None:
    @bare_app.get("/error/unhandled")
    async def trigger_unhandled_error() -> None:  # pragma: no cover - defined in test
        raise RuntimeError("Sensitive detail")

    async with _client(bare_app) as client:
        response = await client.get("/error/unhandled", headers={"X-Request-ID": "boom-1"})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {
        "code": "server_error",
        "message": "Internal server error.",
        "details": {"request_id": "boom-1"},
    }
    assert "Sensitive" not in response.text


async def test_server_error_renders_the_generic_envelope(bare_app) -> None:
    @bare_app.get("/error/server")
    async def trigger_server_error() -> None:  # pragma: no cover - defined in test
        raise ServerError(details={"job": "deadline-scan"})

    async with _client(bare_app) as client:
        response = await client.get("/error/server", headers={"X-Request-ID": "srv-1"})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {
        "code": "server_error",
        "message": "Internal server error.",
        "details": {"request_id": "srv-1", "job": "deadline-scan"},
    }


class _InMemoryHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


async def test_request_context_attached_to_logs(bare_app) -> None:
    logger = logging.getLogger("tests.error_handling")
    handler = _InMemoryHandler()
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)
    original_level = logger.level
    logger.setLevel(logging.INFO)

    @bare_app.get("/log")
    async def emit_log() -> dict[str, str]:  # pragma: no cover - defined in test
        logger.info("Log entry")
        return {"status": "ok"}

    try:
        async with _client(bare_app) as client:
            response = await client.get("/log", headers={"X-Forwarded-For": "192.0.2.9, 10.0.0.1"})
    finally:
        logger.removeHandler(handler)
        logger.setLevel(original_level)
        handler.close()

    request_id = response.headers["X-Request-ID"]
    matching = [record for record in handler.records if record.getMessage() == "Log entry"]
    assert matching
    assert getattr(matching[0], "request_id", None) == request_id
    assert getattr(matching[0], "client_ip", None) == "192.0.2.9"
