"""CSP violation report ingestion endpoint.

Browsers POST violation reports as ``application/csp-report`` JSON. The
handler gates on content type, reads and decodes the envelope, then hands
the report to a sink. Every failure goes through a single error hook, which
decides what the client sees.
"""

from __future__ import annotations

from typing import Protocol

import structlog
from fastapi import APIRouter
from pydantic import ValidationError
from starlette.requests import ClientDisconnect, Request
from starlette.responses import PlainTextResponse, Response

from cspkit.errors import BadRequest, CSPError, InternalError, UnsupportedMediaType
from cspkit.models.report import REPORT_CONTENT_TYPE, ReportEnvelope, ViolationReport

logger = structlog.get_logger()


class ReportSink(Protocol):
    """Receives decoded violation reports. Raise to signal failure."""

    async def report(self, report: ViolationReport) -> None: ...


class ErrorHandler(Protocol):
    """Turns a failed report request into the response sent back."""

    async def error(self, request: Request, status_code: int, exc: Exception) -> Response: ...


class LogReportSink:
    """Default sink: log each report."""

    async def report(self, report: ViolationReport) -> None:
        logger.info("csp_report", **report.log_fields())


class LogErrorHandler:
    """Default error hook: log the error and echo its message with the status."""

    async def error(self, request: Request, status_code: int, exc: Exception) -> Response:
        logger.warning(
            "csp_report_error",
            status_code=status_code,
            error=str(exc),
            path=request.url.path,
        )
        return PlainTextResponse(str(exc), status_code=status_code)


class ReportHandler:
    """Request handler for CSP violation reports.

    Holds no per-request state; one instance may serve concurrent requests
    as long as the injected sink and error handler tolerate that.
    """

    def __init__(
        self,
        sink: ReportSink | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self.sink: ReportSink = sink if sink is not None else LogReportSink()
        self.error_handler: ErrorHandler = (
            error_handler if error_handler is not None else LogErrorHandler()
        )

    async def __call__(self, request: Request) -> Response:
        try:
            await self._ingest(request)
        except CSPError as exc:
            return await self.error_handler.error(request, exc.status_code, exc)
        return Response(status_code=200)

    async def _ingest(self, request: Request) -> None:
        content_type = request.headers.get("content-type")
        if content_type != REPORT_CONTENT_TYPE:
            raise UnsupportedMediaType(
                f"Unsupported content type (expected {REPORT_CONTENT_TYPE})"
            )

        try:
            body = await request.body()
        except (ClientDisconnect, OSError) as exc:
            raise BadRequest(f"Failed to read report body: {exc!r}") from exc

        try:
            envelope = ReportEnvelope.model_validate_json(body)
        except ValidationError as exc:
            raise BadRequest(f"Invalid CSP report: {exc.error_count()} error(s)") from exc

        try:
            await self.sink.report(envelope.csp_report)
        except Exception as exc:
            raise InternalError(f"Report sink failed: {exc}") from exc


def build_report_router(
    handler: ReportHandler | None = None,
    path: str = "/csp-report",
) -> APIRouter:
    """Mount a report handler as a POST route."""
    if handler is None:
        handler = ReportHandler()

    router = APIRouter(tags=["csp"])

    async def csp_report(request: Request) -> Response:
        return await handler(request)

    router.add_api_route(path, csp_report, methods=["POST"], include_in_schema=False)
    return router
