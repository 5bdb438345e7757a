"""Order lifecycle package."""

from tradeflow.orders.state_machine import InvalidTransitionError, OrderStateMachine
from tradeflow.orders.store import DeskStats, OrderStore
from tradeflow.orders.types import (
    TERMINAL_STATES,
    Instrument,
    Order,
    OrderIntent,
    OrderState,
    OrderType,
    StateTransition,
    Strategy,
    ValidationResult,
    ValidationStep,
)

__all__ = [
    "TERMINAL_STATES",
    "DeskStats",
    "Instrument",
    "InvalidTransitionError",
    "Order",
    "OrderIntent",
    "OrderState",
    "OrderStateMachine",
    "OrderStore",
    "OrderType",
    "StateTransition",
    "Strategy",
    "ValidationResult",
    "ValidationStep",
]
