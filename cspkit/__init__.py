"""
cspkit - Content-Security-Policy modelling, header codec and violation report collection
"""

__version__ = "0.1.0"

from cspkit.api.report_routes import (
    LogErrorHandler,
    LogReportSink,
    ReportHandler,
    build_report_router,
)
from cspkit.middleware.csp_builder import build_csp, merge_csp, parse_csp
from cspkit.middleware.security_headers import SecurityHeaders, csp_handler
from cspkit.models.policy import (
    HEADER_POLICY,
    HEADER_REPORT_ONLY,
    Policy,
    default_policy,
)
from cspkit.models.report import REPORT_CONTENT_TYPE, ViolationReport

__all__ = [
    'HEADER_POLICY',
    'HEADER_REPORT_ONLY',
    'REPORT_CONTENT_TYPE',
    'LogErrorHandler',
    'LogReportSink',
    'Policy',
    'ReportHandler',
    'SecurityHeaders',
    'ViolationReport',
    'build_csp',
    'build_report_router',
    'csp_handler',
    'default_policy',
    'merge_csp',
    'parse_csp',
]
