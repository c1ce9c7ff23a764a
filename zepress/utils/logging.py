"""Logging setup for hosts embedding the pipeline.

The library itself only emits structlog events; hosts call
:func:`setup_logging` once to route them through the standard library with
Rich output (theme development) or JSON lines (editor integrations).
"""

import logging
from typing import Optional, Union

import structlog
from rich.logging import RichHandler

from ..constants import LOG_JSON, LOG_LEVEL

# Third-party loggers that are chatty at DEBUG
QUIET_LOGGERS = ("markdown_it", "asyncio")


def setup_logging(level: Optional[Union[str, int]] = None, json_logs: Optional[bool] = None) -> int:
    """Configure structured logging.

    Args:
        level: Level name or number (defaults to ``ZEPRESS_LOG_LEVEL``)
        json_logs: Render JSON lines instead of console output (defaults to
            ``ZEPRESS_LOG_JSON``)

    Returns:
        The numeric level that was applied
    """
    if level is None:
        level = LOG_LEVEL
    log_level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(log_level, int):
        log_level = logging.INFO
    if json_logs is None:
        json_logs = LOG_JSON

    handler: logging.Handler = logging.StreamHandler() if json_logs else RichHandler(rich_tracebacks=True)
    logging.basicConfig(level=log_level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.INFO))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    return log_level


def get_plugin_logger(plugin_name: str, **context) -> structlog.BoundLogger:
    """Logger for a plugin; every event carries the plugin name."""
    return structlog.get_logger(plugin_name).bind(plugin=plugin_name, **context)
