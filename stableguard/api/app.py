"""
StableGuard — FastAPI Application.

Run: stableguard-api  (binds API_HOST:API_PORT)

Routes:
  - POST /api/v1/events/report-updated  ← ledger relay pushes ReportUpdated logs
  - POST /api/v1/attest/text            ← ad hoc text requests
  - GET  /health                        ← liveness probe
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional

import structlog
import uvicorn
from fastapi import FastAPI

from stableguard.alerting.dedup import InMemoryDedupStore
from stableguard.api.routers.attest import router as attest_router
from stableguard.api.routers.events import router as events_router
from stableguard.config import Settings, settings as default_settings
from stableguard.log_setup import configure_logging
from stableguard.middleware.error_handler import ErrorHandlerMiddleware
from stableguard.middleware.request_context import RequestContextMiddleware
from stableguard.workflows.context import InvocationContext, build_context, build_ledger

logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    context_factory: Optional[Callable[[], InvocationContext]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "stableguard_api_starting",
            version=settings.app_version,
            environment=settings.environment,
            ledger_mode=settings.ledger_mode,
            text_generator=settings.text_generator_provider,
        )
        if not settings.alert_webhook_url:
            logger.warning("alert_webhook_url_not_set", msg="Alerts and attestations will not be delivered")
        yield
        logger.info("stableguard_api_shutdown")

    app = FastAPI(
        title=settings.app_name,
        description="Stablecoin reserve compliance evaluation and reporting.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    if context_factory is None:
        dedup = InMemoryDedupStore()
        ledger = build_ledger(settings)

        def context_factory() -> InvocationContext:
            return build_context(settings, dedup=dedup, ledger=ledger)

    app.state.settings = settings
    app.state.context_factory = context_factory

    # Last added = outermost
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.debug)

    app.include_router(events_router)
    app.include_router(attest_router)

    @app.get("/health", tags=["health"])
    async def health():
        """Liveness probe. Does NOT check collaborators."""
        return {
            "status": "ok",
            "version": settings.app_version,
            "service": "stableguard",
            "environment": settings.environment,
            "ledger_mode": settings.ledger_mode,
        }

    return app


def _build_default_app() -> FastAPI:
    configure_logging(default_settings)
    return create_app()


app = _build_default_app()


def run():
    """Serve the default app on the configured host and port."""
    uvicorn.run(app, host=default_settings.api_host, port=default_settings.api_port)
