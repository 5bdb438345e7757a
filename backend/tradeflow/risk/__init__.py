"""Risk rules and the validation engine."""

from tradeflow.risk.rules import RISK_LIMITS, STRATEGY_RESTRICTIONS, InstrumentLimits
from tradeflow.risk.validation import validate

__all__ = [
    "RISK_LIMITS",
    "STRATEGY_RESTRICTIONS",
    "InstrumentLimits",
    "validate",
]
