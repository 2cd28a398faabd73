"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import health, hub_network, notifications, order_requests
from .config import settings
from .logging_config import setup_logging
from .services.context import AppContext, build_context

logger = logging.getLogger(__name__)


def create_app(context: AppContext | None = None) -> FastAPI:
    app_context = context or build_context()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app_context.sync_hub_network():
            logger.info("Hub network index rebuilt at startup")
        yield

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.context = app_context
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(order_requests.router, prefix=settings.api_prefix)
    app.include_router(notifications.router, prefix=settings.api_prefix)
    app.include_router(hub_network.router, prefix=settings.api_prefix)
    return app


def build_default_app() -> FastAPI:
    setup_logging()
    return create_app()


app = build_default_app()
