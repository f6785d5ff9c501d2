"""Structlog configuration for the back office.

Console rendering when attached to a terminal, JSON lines otherwise. Event
keys that name secrets (tokens, passwords) are masked before rendering with
the same rules the audit trail applies, so a probe that slips one in cannot
leak it.
"""

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from shared_kernel.audit.redaction import (
    DEFAULT_SENSITIVE_KEYS,
    REDACTED,
    is_sensitive_key,
)


def mask_sensitive_keys(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Structlog processor replacing secret-looking values with a mask."""
    for key in list(event_dict):
        if key != "event" and is_sensitive_key(key, DEFAULT_SENSITIVE_KEYS):
            event_dict[key] = REDACTED
    return event_dict


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(level: int | str | None = None) -> None:
    """Configure structlog for scripts and services.

    Args:
        level: Minimum level, as a stdlib number or name. Defaults to the
            BACKOFFICE_LOG_LEVEL environment variable, then INFO.
    """
    if level is None:
        level = os.environ.get("BACKOFFICE_LOG_LEVEL", "INFO")

    # FORCE_COLOR=1 keeps colors in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    use_colors = force_color or sys.stdout.isatty()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        mask_sensitive_keys,
        structlog.processors.StackInfoRenderer(),
    ]
    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer(colors=True)
        if use_colors
        else structlog.processors.JSONRenderer()
    )
    tail = [] if use_colors else [structlog.processors.format_exc_info]

    structlog.configure(
        processors=[*shared_processors, *tail, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
