"""Tradeflow error hierarchy.

Only structural and transport faults are exceptions. A failed risk
check is a normal ValidationResult, not an error.
"""

from __future__ import annotations


class TradeflowError(Exception):
    """Base exception for all tradeflow errors."""


class StructuralInputError(TradeflowError):
    """Order request is missing required fields or cannot be parsed.

    Raised before the validation engine runs; never produces a
    ValidationResult.
    """

    def __init__(self, missing_fields: list[str], message: str = "") -> None:
        self.missing_fields = list(missing_fields)
        if not message:
            message = "Missing required fields: " + ", ".join(self.missing_fields)
        super().__init__(message)


class ValidationEngineError(TradeflowError):
    """The validation engine could not be invoked or blew up."""


class MalformedRequestError(StructuralInputError):
    """Required fields are present but hold values of the wrong type."""


class EngineResponseError(ValidationEngineError):
    """The engine boundary answered with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Validation engine returned {status_code}: {message}")
