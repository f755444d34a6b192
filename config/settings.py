"""
Settings for the valuation engine.

Values come from the environment (optionally a local ``.env`` file) so the
host application can tune the engine without code changes.

Usage:
    from config import settings

    settings.configure_logging()
    cache = CalculationCache(max_entries=settings.CACHE_MAX_ENTRIES)
"""

import logging.config
import os

from dotenv import load_dotenv

load_dotenv()

DEBUG = os.getenv("VALUATION_DEBUG", "False") == "True"

LOG_LEVEL = os.getenv("VALUATION_LOG_LEVEL", "INFO").upper()

# Each cache tier keeps at most this many keys (FIFO).
CACHE_MAX_ENTRIES = int(os.getenv("VALUATION_CACHE_MAX_ENTRIES", "10"))

DEFAULT_CURRENCY = os.getenv("VALUATION_DEFAULT_CURRENCY", "GBP").upper()


def configure_logging(debug: bool | None = None) -> None:
    """Apply structlog and stdlib logging configuration."""
    from config.logging import configure_structlog, get_logging_config

    debug = DEBUG if debug is None else debug
    configure_structlog(debug=debug)
    logging.config.dictConfig(get_logging_config(debug=debug, level=LOG_LEVEL))
