"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fleet_deductions.api.errors import register_error_handlers
from fleet_deductions.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fleet_deductions.api.v1 import drivers, penalties
from fleet_deductions.infrastructure.observability.logging import setup_logging
from fleet_deductions.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fleet Deductions",
        description="Penalty catalog, driver deductions and driver blocking",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(penalties.router, prefix="/v1", tags=["penalties"])
    app.include_router(drivers.router, prefix="/v1", tags=["drivers"])

    return app


app = create_app()
