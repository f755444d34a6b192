"""
Structured logging for the valuation engine.

structlog renders JSON by default and coloured console output when
debugging. Records from plain ``logging`` loggers go through the same
renderer via ``ProcessorFormatter``.

Usage:
    from config.logging import configure_structlog, get_logging_config

    configure_structlog(debug=True)
    logging.config.dictConfig(get_logging_config(debug=True))

Most hosts call ``config.settings.configure_logging()`` instead, which does
both with the values from the environment.
"""

import sys
from typing import Any

import structlog

ENGINE_LOGGERS = ("valuation", "valuation.services.cache")


def _pre_chain() -> list[Any]:
    """Processors applied to every event before rendering."""
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(debug: bool) -> Any:
    if debug:
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.JSONRenderer()


def configure_structlog(debug: bool = False) -> None:
    """
    Configure structlog for the engine.

    Loggers are cached on first use, so call this before the first
    calculation that logs.

    Args:
        debug: Console output with colours when True, JSON otherwise.
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        *_pre_chain(),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]
    if not debug:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.dict_tracebacks,
        ]
    processors.append(_renderer(debug))

    structlog.configure(
        processors=processors,  # type: ignore
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logging_config(debug: bool = False, level: str = "INFO") -> dict[str, Any]:
    """
    Return a ``logging.config.dictConfig`` dict.

    Args:
        debug: Console formatter and DEBUG level for the engine loggers when
            True, JSON formatter and ``level`` otherwise.
        level: Level for the engine loggers outside debug. Cache misses and
            evictions log at DEBUG, invalidations at INFO.
    """
    engine_level = "DEBUG" if debug else level

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            name: {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": _renderer(name == "console"),
                "foreign_pre_chain": _pre_chain(),
            }
            for name in ("json", "console")
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console" if debug else "json",
                "stream": sys.stdout,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "loggers": {
            name: {
                "handlers": ["console"],
                "level": engine_level,
                "propagate": False,
            }
            for name in ENGINE_LOGGERS
        },
    }
