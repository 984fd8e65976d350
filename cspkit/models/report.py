"""Pydantic models for browser CSP violation reports."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

REPORT_CONTENT_TYPE = "application/csp-report"


class ViolationReport(BaseModel):
    """A single violation as submitted by the browser.

    Unknown keys (``source-file``, ``line-number``, ...) are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    document_uri: str = Field("", alias="document-uri")
    referrer: str = ""
    blocked_uri: str = Field("", alias="blocked-uri")
    effective_directive: str = Field("", alias="effective-directive")
    violated_directive: str = Field("", alias="violated-directive")
    original_policy: str = Field("", alias="original-policy")
    disposition: str = ""
    status_code: int | None = Field(None, alias="status")

    def log_fields(self) -> dict[str, Any]:
        """Fields for structured logging, snake_case keys."""
        return self.model_dump()


class ReportEnvelope(BaseModel):
    """Wire envelope: ``{"csp-report": {...}}``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    csp_report: ViolationReport = Field(..., alias="csp-report")
