"""Env var config loading with pydantic-settings."""

from __future__ import annotations

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()


class CSPSettings(BaseSettings):
    """CSP service configuration, overridden by ``CSP_*`` env vars."""

    model_config = SettingsConfigDict(
        env_prefix="CSP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "info"
    log_json: bool = True

    # Policy: preset name from policy_presets.yaml, plus CSP text merged on top
    policy_preset: str = "default"
    policy_override: str = ""
    report_only: bool = False
    report_to: str = ""

    # Violation report endpoint
    report_path: str = "/csp-report"


_settings: CSPSettings | None = None


def get_settings() -> CSPSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> CSPSettings:
    """Load settings from env vars (env vars override model defaults)."""
    global _settings
    _settings = CSPSettings()
    logger.info(
        "config_loaded",
        preset=_settings.policy_preset,
        report_only=_settings.report_only,
        report_path=_settings.report_path,
    )
    return _settings
