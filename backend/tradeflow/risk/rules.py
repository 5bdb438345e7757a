"""Fixed desk risk-rule table.

Not user-editable at runtime: these limits are module constants,
not settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from tradeflow.orders.types import Instrument, Strategy

# Check names, in evaluation order
CHECK_QUANTITY = "Quantity Limits"
CHECK_PRICE = "Price Sanity Check"
CHECK_NOTIONAL = "Notional Exposure Cap"
CHECK_STRATEGY = "Strategy Restriction"
CHECK_EXPOSURE = "Daily Exposure Cap"

CHECK_ORDER: tuple[str, ...] = (
    CHECK_QUANTITY,
    CHECK_PRICE,
    CHECK_NOTIONAL,
    CHECK_STRATEGY,
    CHECK_EXPOSURE,
)

# First failing check in this order supplies the rejection reason
REASON_PRIORITY: tuple[str, ...] = (
    CHECK_PRICE,
    CHECK_NOTIONAL,
    CHECK_STRATEGY,
    CHECK_EXPOSURE,
    CHECK_QUANTITY,
)

# Orders above this fraction of the instrument's daily lot cap are flagged
MAX_DAILY_EXPOSURE_PCT = Decimal("0.15")


@dataclass(frozen=True)
class InstrumentLimits:
    """Per-instrument risk parameters."""

    max_quantity: Decimal
    max_notional: Decimal
    min_price: Decimal
    max_price: Decimal
    daily_cap: Decimal


RISK_LIMITS: MappingProxyType[Instrument, InstrumentLimits] = MappingProxyType(
    {
        Instrument.INDEX: InstrumentLimits(
            max_quantity=Decimal("500"),
            max_notional=Decimal("10000000"),
            min_price=Decimal("1000"),
            max_price=Decimal("30000"),
            daily_cap=Decimal("2000"),
        ),
        Instrument.FUTURES: InstrumentLimits(
            max_quantity=Decimal("1000"),
            max_notional=Decimal("50000000"),
            min_price=Decimal("50"),
            max_price=Decimal("50000"),
            daily_cap=Decimal("5000"),
        ),
        Instrument.EQUITY: InstrumentLimits(
            max_quantity=Decimal("5000"),
            max_notional=Decimal("25000000"),
            min_price=Decimal("0.01"),
            max_price=Decimal("10000"),
            daily_cap=Decimal("20000"),
        ),
    }
)

STRATEGY_RESTRICTIONS: MappingProxyType[Strategy, frozenset[Instrument]] = (
    MappingProxyType(
        {
            Strategy.MOMENTUM: frozenset(),
            Strategy.MEAN_REVERSION: frozenset(),
            Strategy.ARBITRAGE: frozenset({Instrument.INDEX}),
            Strategy.DELTA_NEUTRAL: frozenset(),
            Strategy.CUSTOM: frozenset({Instrument.FUTURES}),
        }
    )
)


def limits_for(instrument: Instrument) -> InstrumentLimits:
    """Risk parameters for ``instrument``."""
    return RISK_LIMITS[instrument]


def is_restricted(strategy: Strategy, instrument: Instrument) -> bool:
    """Whether desk policy blocks ``strategy`` on ``instrument``."""
    return instrument in STRATEGY_RESTRICTIONS.get(strategy, frozenset())
