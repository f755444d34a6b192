class ValuationError(Exception):
    """Base exception for all valuation related errors."""

    pass


class ConfigurationError(ValuationError):
    """Raised when engine settings are unusable (e.g., cache size < 1)."""

    pass


class InvalidPortfolioError(ValuationError, ValueError):
    """Raised when a portfolio record cannot be turned into domain objects."""

    pass


class UnknownDimensionError(ValuationError, ValueError):
    """Raised when a breakdown is requested for an unsupported dimension."""

    pass
