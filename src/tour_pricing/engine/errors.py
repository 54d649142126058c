"""
Typed outcomes of a pricing calculation that are not a quote.
"""
from typing import Optional


class CalculationError(Exception):
    """Base class for resolver failures."""
    status_code = 500

    def __init__(self, error: str, details: Optional[list[str]] = None):
        super().__init__(error)
        self.error = error
        self.details = details or []

    def to_response(self) -> dict:
        body = {"success": False, "error": self.error}
        if self.details:
            body["details"] = "; ".join(self.details)
        return body


class InvalidInput(CalculationError):
    """The request is missing a field or carries an out-of-range value."""
    status_code = 400


class NoTierFound(CalculationError):
    """No active tier matches the request. A business outcome, not a fault."""
    status_code = 404


class ConfigurationUnavailable(CalculationError):
    """The tier/modifier store could not be read."""
    status_code = 503


class RecordNotFound(LookupError):
    """An admin operation referenced a tier or modifier id that does not exist."""
