"""Order state machine -- pure transition logic with validation.

No I/O, no store access. Validates state transitions against a static
table and raises on invalid ones.
"""

from __future__ import annotations

from typing import ClassVar

from tradeflow.errors import TradeflowError
from tradeflow.orders.types import TERMINAL_STATES, OrderState


class InvalidTransitionError(TradeflowError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: OrderState, to_state: OrderState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state.value} -> {to_state.value}")


class OrderStateMachine:
    """Forward-only lifecycle: CREATED -> VALIDATED -> RISK_APPROVED -> READY.

    REJECTED is reachable from CREATED (engine failure) and VALIDATED
    (failed checks). READY and REJECTED are absorbing.
    """

    TRANSITIONS: ClassVar[dict[OrderState, frozenset[OrderState]]] = {
        OrderState.CREATED: frozenset(
            {
                OrderState.VALIDATED,
                OrderState.REJECTED,
            }
        ),
        OrderState.VALIDATED: frozenset(
            {
                OrderState.RISK_APPROVED,
                OrderState.REJECTED,
            }
        ),
        OrderState.RISK_APPROVED: frozenset(
            {
                OrderState.READY,
            }
        ),
    }

    def __init__(self, state: OrderState = OrderState.CREATED) -> None:
        self._state = state

    @property
    def state(self) -> OrderState:
        """Current state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Whether the current state is terminal (no further transitions)."""
        return self._state in TERMINAL_STATES

    def can_transition(self, to: OrderState) -> bool:
        return to in self.TRANSITIONS.get(self._state, frozenset())

    def check(self, to: OrderState) -> None:
        """Raise InvalidTransitionError unless ``to`` is reachable in one step."""
        if self.is_terminal or not self.can_transition(to):
            raise InvalidTransitionError(self._state, to)

    def transition(self, to: OrderState) -> None:
        """Validate and apply a state transition.

        Raises:
            InvalidTransitionError: If the transition is not allowed.
        """
        self.check(to)
        self._state = to
