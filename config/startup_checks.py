"""
Startup validation checks.

Validates configuration before the engine is used, giving fast failure with
clear error messages rather than odd cache behaviour later on.
"""

import re

from config import settings
from valuation.exceptions import ConfigurationError

CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


def validate_config() -> None:
    """
    Validate the values read by ``config.settings``.

    Raises:
        ConfigurationError: If any setting is unusable.

    Usage:
        from config.startup_checks import validate_config
        validate_config()
    """
    problems = []

    if settings.CACHE_MAX_ENTRIES < 1:
        problems.append(
            f"VALUATION_CACHE_MAX_ENTRIES must be a positive integer, "
            f"got {settings.CACHE_MAX_ENTRIES}"
        )

    if not CURRENCY_CODE.match(settings.DEFAULT_CURRENCY):
        problems.append(
            f"VALUATION_DEFAULT_CURRENCY must be a three-letter ISO code, "
            f"got {settings.DEFAULT_CURRENCY!r}"
        )

    if problems:
        raise ConfigurationError(
            "Invalid valuation configuration:\n"
            + "\n".join(problems)
            + "\nSet these in your environment or .env file."
        )
