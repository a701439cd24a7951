"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from crm_insights.api.middleware import RequestIDMiddleware, MetricsMiddleware
from crm_insights.api.v1 import clients, messages
from crm_insights.infrastructure.observability.logging import setup_logging
from crm_insights.config import settings


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    setup_logging(settings.log_level)

    app = FastAPI(
        title="CRM Insights",
        description="Customer message classification and behavioral scoring service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(messages.router, prefix="/v1", tags=["messages"])
    app.include_router(clients.router, prefix="/v1", tags=["clients"])

    return app


app = create_app()
