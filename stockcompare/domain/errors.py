"""
Domain error taxonomy.

InvalidInputError is raised before any external call. DataUnavailableError is
always scoped to one symbol and recoverable; batch operations capture it on the
affected entry instead of propagating it.
"""


class StockCompareError(Exception):
    """Base class for application errors"""


class InvalidInputError(StockCompareError, ValueError):
    """Empty or malformed symbol/period"""


class DataUnavailableError(StockCompareError):
    """Market data for a symbol could not be obtained or was malformed"""

    def __init__(self, message: str, symbol: str = "", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.symbol = symbol
        self.status_code = status_code


class ConfigurationError(StockCompareError):
    """A required setting (API key, provider name) is missing or invalid"""
