"""structlog JSON logging setup."""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

# Report fields are browser-controlled; cap what reaches the log sink.
_MAX_FIELD_LENGTH = 2048


def _rename_logger_to_module(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """Rename 'logger' key to 'module' for structured log field consistency."""
    if "logger" in event_dict:
        event_dict["module"] = event_dict.pop("logger")
    return event_dict


def _truncate_long_values(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """Truncate oversized string values (policies, URIs) in the event."""
    for key, value in event_dict.items():
        if isinstance(value, str) and len(value) > _MAX_FIELD_LENGTH:
            event_dict[key] = value[:_MAX_FIELD_LENGTH] + "...[truncated]"
    return event_dict


def setup_logging(
    log_level: str = "info",
    json_format: bool = True,
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog for JSON or human-readable output."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _rename_logger_to_module,
        _truncate_long_values,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
