"""
Structured logging for the strike-band engine.

``setup_logging()`` is called once by the CLI.  After that, structlog
loggers (services) and plain ``logging.getLogger("strike.*")`` loggers
(analysis modules) render through one formatter, and both pick up the
context bound with :func:`symbol_context`, so a warning raised deep in
the drawdown code still carries the symbol and job that triggered it.

Usage::

    from src.strike_lib.core.logging_config import get_logger, setup_logging, symbol_context

    setup_logging(service="strike-engine", log_format="json")
    logger = get_logger("strike.runner")

    with symbol_context("AAPL", job="range"):
        logger.info("metric_computed", percentile_range=0.0412345678)
    # => {"event": "metric_computed", "percentile_range": 0.041235, "symbol": "AAPL", "job": "range", ...}

LOG_LEVEL and LOG_FORMAT (``console`` | ``json``) are read from the
environment when not passed explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

LOG_FORMATS = ("console", "json")

# metric values are ratios; more digits than this is noise in a log line
_FLOAT_DIGITS = 6


def _round_floats(_logger: Any, _method: str, event_dict: dict) -> dict:
    for key, value in event_dict.items():
        if isinstance(value, float):
            event_dict[key] = round(value, _FLOAT_DIGITS)
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _round_floats,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty(), pad_event_to=24)


def setup_logging(
    *,
    service: str = "strike-engine",
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Route structlog and stdlib ``logging`` through one stderr handler.

    Parameters
    ----------
    service:
        Bound to every event as ``service=``.
    level:
        Root level name; defaults to ``$LOG_LEVEL`` or ``INFO``.
    log_format:
        One of :data:`LOG_FORMATS`; defaults to ``$LOG_FORMAT`` or
        ``console``.  Unknown values fall back to ``console``.
    """
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_format = (log_format or os.getenv("LOG_FORMAT") or "console").lower()
    if log_format not in LOG_FORMATS:
        log_format = "console"

    shared = _shared_processors()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service)


@contextmanager
def symbol_context(symbol: str, **binds: Any) -> Iterator[None]:
    """Bind ``symbol=`` (plus *binds*) to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(symbol=symbol, **binds):
        yield


def get_logger(name: str | None = None, **initial_binds: Any) -> structlog.stdlib.BoundLogger:
    """Structured logger named *name*, optionally with permanent key-values."""
    log = structlog.get_logger(name)
    return log.bind(**initial_binds) if initial_binds else log
