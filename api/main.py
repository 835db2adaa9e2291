import uvicorn
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from core.logging import get_api_logger_safe, configure_logging
from core.config.settings import Environment, Settings
from core.config.validator import validate_startup_configuration
from app.containers import AppContainer
from api.middleware.request_ids import RequestIdMiddleware
from api.middleware.error_handling import ErrorHandlingMiddleware
from api.routers import alice

logger = get_api_logger_safe("api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = app.state.container.settings()
    logger.info("Starting Alice Mirror API server", environment=settings.environment.value)
    if not validate_startup_configuration(settings):
        logger.error("Configuration has errors - affected endpoints will fail until fixed")

    yield

    logger.info("Shutting down Alice Mirror API server")


def _add_cors(app: FastAPI, settings: Settings) -> None:
    origins = settings.api.cors_origins
    if settings.environment == Environment.PRODUCTION and "*" in origins:
        raise ValueError("Wildcard CORS origin is not allowed in production; set API__CORS_ORIGINS")
    # The session header must be allowed for browser callers to pass a SID
    headers = list(settings.api.cors_headers)
    if settings.alice.session_header_name not in {h.lower() for h in headers}:
        headers.append(settings.alice.session_header_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=settings.api.cors_methods,
        allow_headers=headers,
    )


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    """Creates and configures the FastAPI application"""
    container = container or AppContainer()
    settings = container.settings()

    configure_logging(settings)

    app = FastAPI(
        title="Alice Mirror API",
        version=settings.version,
        description="""
        # Alice Mirror API

        Thin HTTP surface over the Alice Blue integration.

        - **SID exchange** (dev only): `POST /api/alice/sid`, returns a masked SID
        - **Master trades**: `GET /api/alice/trades`, live or sample data, tagged by `source`
        """,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.prom_registry = container.prometheus_registry()

    # Routes resolve AliceService through the container
    container.wire(modules=["api.routers.alice"])

    # Add middleware (first added is innermost)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    _add_cors(app, settings)

    app.include_router(alice.router, prefix="/api", tags=["Alice Blue"])

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    def health_check():
        alice_settings = settings.alice
        return {
            "status": "healthy",
            "service": "alice-mirror-api",
            "version": settings.version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "features": {
                "live_trades": bool(alice_settings.resolved_trades_endpoint),
                "sample_fallback": alice_settings.allow_fallback,
                "sid_exchange": alice_settings.allow_sid_exchange,
            }
        }

    # Prometheus metrics endpoint
    if settings.monitoring.metrics_enabled:
        @app.get("/metrics", tags=["Monitoring"])
        def metrics():
            data = generate_latest(app.state.prom_registry)
            return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return app


def run():
    """Run the API server with settings from the environment"""
    container = AppContainer()
    settings = container.settings()
    app = create_app(container)
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
