"""Shared test fixtures."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cspkit.models.report import ViolationReport


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Provide default settings for all tests."""
    monkeypatch.setenv("CSP_LOG_JSON", "false")
    monkeypatch.setenv("CSP_LOG_LEVEL", "debug")

    # Reset cached settings and presets
    import cspkit.config.loader as loader
    from cspkit.middleware.security_headers import reset_presets_cache

    loader._settings = None
    reset_presets_cache()
    yield
    loader._settings = None
    reset_presets_cache()


class RecordingSink:
    """Report sink that keeps every report it receives."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.reports: list[ViolationReport] = []
        self.fail_with = fail_with

    async def report(self, report: ViolationReport) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.reports.append(report)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def client(sink):
    """FastAPI test client with a recording report sink."""
    from cspkit.config.loader import load_settings
    from cspkit.main import create_app

    app = create_app(load_settings(), sink=sink)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
