"""FastAPI application serving the CSP header and the violation report endpoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import Response

from cspkit.api.report_routes import ErrorHandler, ReportHandler, ReportSink, build_report_router
from cspkit.config.loader import CSPSettings, get_settings
from cspkit.logging_config import setup_logging
from cspkit.middleware.pipeline import MiddlewarePipeline, RequestContext
from cspkit.middleware.security_headers import SecurityHeaders, resolve_policy

logger = structlog.get_logger()


def create_app(
    settings: CSPSettings | None = None,
    sink: ReportSink | None = None,
    error_handler: ErrorHandler | None = None,
) -> FastAPI:
    """Build the application.

    Every response, report endpoint included, goes through the middleware
    pipeline and so carries the configured CSP header.
    """
    if settings is None:
        settings = get_settings()
    policy = resolve_policy(settings)

    pipeline = MiddlewarePipeline()
    pipeline.add(SecurityHeaders(policy))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(log_level=settings.log_level, json_format=settings.log_json)
        logger.info(
            "csp_service_started",
            header=policy.header_name,
            report_path=settings.report_path,
        )
        yield
        logger.info("csp_service_stopped")

    app = FastAPI(title="CSP Report Collector", lifespan=lifespan)

    @app.middleware("http")
    async def apply_pipeline(request: Request, call_next) -> Response:
        context = RequestContext()
        short_circuit = await pipeline.process_request(request, context)
        if short_circuit is not None:
            return await pipeline.process_response(short_circuit, context)
        response = await call_next(request)
        return await pipeline.process_response(response, context)

    @app.get("/health")
    async def health():
        """Health check; reports which CSP header is being served."""
        return {"status": "healthy", "header": policy.header_name}

    handler = ReportHandler(sink=sink, error_handler=error_handler)
    app.include_router(build_report_router(handler, path=settings.report_path))
    return app
