"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.responses import JSONResponse
import structlog

from flagstore.core.config import settings
from flagstore.core.features import (
    Adapter,
    build_feature_adapter,
    create_redis_client,
)
from flagstore.api.errors import register_exception_handlers
from flagstore.api.routes import router as api_router
from flagstore.api.middleware import LoggingMiddleware, RequestIdMiddleware
from flagstore.utils.context import configure_logging
from flagstore.utils.health import HealthStatus, check_feature_store

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    configure_logging(settings.log_level, settings.log_format)

    client = None
    if settings.features.backend == "redis":
        client = create_redis_client(settings.redis)
    app.state.feature_adapter = build_feature_adapter(settings, client)
    logger.info("Feature store ready", adapter=app.state.feature_adapter.name)

    yield

    # Shutdown
    if client is not None:
        await client.aclose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Middleware (order matters - last added is outermost)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Routes
    app.include_router(api_router, prefix="/api")

    # Exception handlers
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check(adapter: Adapter):
        """Health check with feature store connectivity."""
        component = await check_feature_store(adapter)
        status_code = 503 if component.status is HealthStatus.UNHEALTHY else 200
        return JSONResponse(
            status_code=status_code,
            content={
                "status": component.status.value,
                "version": settings.app_version,
                "environment": settings.environment,
                "components": {component.name: component.to_dict()},
            },
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "flagstore.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )
