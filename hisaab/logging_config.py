"""
Structured Logging Setup

Every module logs through structlog with event-style names
(e.g. "invoice_saved"), routed into the standard library so
third-party log lines end up in the same stream.

Passwords are never passed to a logger.
"""

import logging
import sys
from typing import Optional

import structlog

from hisaab.config import get_settings


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        level: Log level name. Defaults to AppSettings.log_level, or DEBUG
               when AppSettings.debug_mode is on.
        json_output: Render JSON lines instead of console text.
                     Defaults to AppSettings.log_json.
    """
    app_settings = get_settings().app
    default_level = "DEBUG" if app_settings.debug_mode else app_settings.log_level
    level = (level or default_level).upper()
    if json_output is None:
        json_output = app_settings.log_json

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
