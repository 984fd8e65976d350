"""Error kinds raised by the CSP codec and the report ingestion handler."""

from __future__ import annotations


class CSPError(Exception):
    """Base class for cspkit errors. Carries the HTTP status it maps to."""

    status_code: int = 500


class UnsupportedMediaType(CSPError):
    """Report request did not use the CSP report content type."""

    status_code = 415


class BadRequest(CSPError):
    """Report body could not be read or decoded."""

    status_code = 400


class InternalError(CSPError):
    """The report sink failed while handling a decoded report."""

    status_code = 500


class PolicyEncodeError(CSPError):
    """A policy slot holds a value the codec cannot serialize."""

    status_code = 500
