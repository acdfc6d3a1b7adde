"""Entry point for the HR Desk FastAPI application."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.jobs import close_job_connection
from .core.logging import configure_logging
from .core.middleware import RequestContextMiddleware
from .deps import SettingsDependency
from .errors import register_exception_handlers
from .realtime import RedisChangePublisher, RedisChangeSubscriber, feed
from .schemas.system import RootResponse


def _normalise_prefix(raw: str) -> str:
    prefix = raw.strip()
    if prefix and not prefix.startswith("/"):
        prefix = f"/{prefix}"
    prefix = prefix.rstrip("/")
    return "" if prefix == "/" else prefix


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    settings: Settings = application.state.settings
    feed.install()
    publisher: RedisChangePublisher | None = None
    subscriber: RedisChangeSubscriber | None = None
    if settings.realtime_relay_enabled:
        publisher = RedisChangePublisher.from_settings(settings)
        feed.attach_relay(publisher)
        subscriber = RedisChangeSubscriber.from_settings(feed, settings)
        await subscriber.start()
    try:
        yield
    finally:
        if subscriber is not None:
            await subscriber.stop()
        if publisher is not None:
            feed.attach_relay(None)
            publisher.close()
        feed.clear()
        close_job_connection()


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    settings = get_settings()
    configure_logging(settings)
    feed.install()

    router_prefix = _normalise_prefix(settings.api_prefix)
    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="HR task management with notification rules and an IP allowlist gate.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=f"{router_prefix}/openapi.json",
        lifespan=_lifespan,
    )
    application.state.settings = settings

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    application.add_middleware(RequestContextMiddleware, ip_sentinel=settings.unknown_ip_sentinel)

    application.include_router(api_router, prefix=router_prefix)
    application.include_router(health_router)

    @application.get(
        f"{router_prefix}/metadata",
        response_model=RootResponse,
        tags=["system"],
        summary="Service metadata",
    )
    async def read_api_metadata(settings: SettingsDependency) -> RootResponse:
        return RootResponse(
            name=settings.project_name,
            environment=settings.environment,
            version=settings.version,
            api_prefix=settings.api_prefix,
        )

    register_exception_handlers(application)
    return application


app = create_app()


def run() -> None:
    """Console entry point (``hrdesk``)."""

    settings: Settings = get_settings()
    uvicorn.run(
        "hrdesk.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
