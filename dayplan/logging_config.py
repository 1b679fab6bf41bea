"""
Structured logging for dayplan, using structlog over stdlib.

dayplan is a library, so nothing in the selection package configures logging;
modules only call get_logger(). A host application (or a test) calls
setup_logging() once. Three things differ from a plain application setup:

- Level and format come from DAYPLAN_LOG_LEVEL / DAYPLAN_LOG_FORMAT.
- package_only=True routes only the "dayplan" logger to the handler and
  stops propagation, so the host's root logger is left alone.
- The stream is injectable and console output is uncoloured, which keeps
  captured output (files, pytest's capsys, StringIO) free of ANSI codes.

Usage:
    from dayplan.logging_config import setup_logging, get_logger
    setup_logging(level="DEBUG", package_only=True)
    logger = get_logger(__name__)
    logger.info("selection_validated", violations=0)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

import structlog


PACKAGE_LOGGER = "dayplan"

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _resolve_options(level: str | None, json_output: bool | None) -> tuple[int, bool]:
    level = level or os.environ.get("DAYPLAN_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.environ.get("DAYPLAN_LOG_FORMAT", "").lower() == "json"
    return getattr(logging, level.upper(), logging.INFO), json_output


def _build_handler(json_output: bool, stream: IO[str] | None) -> logging.Handler:
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: IO[str] | None = None,
    package_only: bool = False,
) -> None:
    """
    Configure structlog and attach a single handler.

    Args:
        level: Log level name, falls back to DAYPLAN_LOG_LEVEL then INFO
        json_output: Render JSON lines, falls back to DAYPLAN_LOG_FORMAT == "json"
        stream: Output stream (stderr by default)
        package_only: Attach the handler to the "dayplan" logger instead of root
    """
    numeric_level, json_output = _resolve_options(level, json_output)

    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    target = logging.getLogger(PACKAGE_LOGGER if package_only else None)
    target.handlers.clear()
    target.addHandler(_build_handler(json_output, stream))
    target.setLevel(numeric_level)
    if package_only:
        target.propagate = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["PACKAGE_LOGGER", "get_logger", "setup_logging"]
