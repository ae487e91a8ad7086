"""Structured logging setup with structlog and run IDs.

Supports two output modes:
- "json": Machine-readable JSON lines (backtests, log shipping)
- "console": Human-readable colored output (for development)

A run ID (backtest run or live session) is held in a context variable and
injected into every log entry, so records from parallel runs can be told
apart. The core never sets it: the host process calls setup_logging() once
at startup, then set_run_id() at the start of each backtest run or trading
session, in the context (thread or task) that drives the series.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog

_run_id: ContextVar[str] = ContextVar("run_id", default="")


def set_run_id(run_id: str) -> None:
    """Set the run ID for the current context."""
    _run_id.set(run_id)


def get_run_id() -> str:
    """Get the run ID for the current context."""
    return _run_id.get()


def _add_run_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Inject run_id into every log entry."""
    run_id = get_run_id()
    if run_id:
        event_dict["run_id"] = run_id
    return event_dict


def setup_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog for the candle core and its host process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Output format - "json" or "console".
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_run_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
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

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))


def get_logger(name: str, **initial_values: object) -> structlog.stdlib.BoundLogger:
    """Get a named structlog logger, optionally pre-bound with context.

    CandleSeries binds its symbol and resolution here so every record it
    emits carries them.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name, **initial_values)
    return logger
