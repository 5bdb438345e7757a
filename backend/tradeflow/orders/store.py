"""Order store -- the single owner of Order aggregates.

An explicit, injectable container: each desk (or test) creates its
own instance. Every mutation goes through apply_transition(), which
checks everything up front so a rejected call leaves nothing behind.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

import structlog

from tradeflow.orders.state_machine import OrderStateMachine
from tradeflow.orders.types import (
    TERMINAL_STATES,
    Order,
    OrderState,
    StateTransition,
    ValidationStep,
)
from tradeflow.utils.time import utc_now

log = structlog.get_logger()


@dataclass(frozen=True)
class DeskStats:
    """Blotter summary counts."""

    total: int
    ready: int
    rejected: int
    in_flight: int
    accept_rate: int


class OrderStore:
    """In-memory order book for one simulated desk."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._orders: dict[str, Order] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._orders)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._orders

    @property
    def orders(self) -> list[Order]:
        """All orders, newest first."""
        return list(reversed(self._orders.values()))

    def add(self, order: Order) -> Order:
        """Take ownership of a freshly created order."""
        if order.id in self._orders:
            raise ValueError(f"Duplicate order id: {order.id}")
        if order.state is not OrderState.CREATED or order.transitions:
            raise ValueError("Orders must enter the store in CREATED with no history")
        self._orders[order.id] = order
        log.info(
            "order_created",
            order_id=order.id,
            instrument=order.instrument.value,
            order_type=order.order_type.value,
            qty=str(order.quantity),
            price=None if order.price is None else str(order.price),
            strategy=order.strategy.value,
        )
        return order

    def get(self, order_id: str) -> Order | None:
        return self._orders.get(order_id)

    def remove(self, order_id: str) -> Order | None:
        """Destroy an order. Returns it, or None if unknown."""
        order = self._orders.pop(order_id, None)
        if order is not None:
            log.info("order_removed", order_id=order_id, state=order.state.value)
        return order

    def clear(self) -> None:
        count = len(self._orders)
        self._orders.clear()
        log.info("orders_cleared", count=count)

    def apply_transition(
        self,
        order_id: str,
        to: OrderState,
        note: str | None = None,
        validation_steps: Iterable[ValidationStep] | None = None,
        rejection_reason: str | None = None,
    ) -> Order | None:
        """Move an order to ``to`` and append the transition to its log.

        ``validation_steps`` is accepted only on the transition into
        VALIDATED, where it is required. ``rejection_reason`` is
        required on, and only accepted on, the transition into REJECTED.
        Unknown ids are ignored and return None.

        Raises:
            InvalidTransitionError: If ``to`` is not reachable from the
                order's current state.
            ValueError: If the payload does not fit the target state.
        """
        order = self._orders.get(order_id)
        if order is None:
            log.warning(
                "transition_ignored_unknown_order",
                order_id=order_id,
                to=to.value,
            )
            return None

        machine = OrderStateMachine(order.state)
        machine.check(to)

        steps: tuple[ValidationStep, ...] | None = None
        if validation_steps is not None:
            if to is not OrderState.VALIDATED:
                raise ValueError(
                    f"Validation steps can only be recorded on VALIDATED, not {to.value}"
                )
            steps = tuple(validation_steps)
        elif to is OrderState.VALIDATED:
            raise ValueError("VALIDATED transition requires validation steps")

        if rejection_reason is not None and to is not OrderState.REJECTED:
            raise ValueError(
                f"Rejection reason can only be recorded on REJECTED, not {to.value}"
            )
        if to is OrderState.REJECTED and not rejection_reason:
            raise ValueError("REJECTED transition requires a rejection reason")

        transition = StateTransition(
            from_state=order.state,
            to_state=to,
            timestamp=self._clock(),
            note=note,
        )
        machine.transition(to)
        order.transitions.append(transition)
        order.state = machine.state
        if steps is not None:
            order.validation_steps = steps
        if rejection_reason is not None:
            order.rejection_reason = rejection_reason

        log.info(
            "order_transitioned",
            order_id=order_id,
            from_state=transition.from_state.value,
            to_state=to.value,
            note=note,
        )
        return order

    def stats(self) -> DeskStats:
        """Counts for the blotter header."""
        total = len(self._orders)
        ready = sum(1 for o in self._orders.values() if o.state is OrderState.READY)
        rejected = sum(
            1 for o in self._orders.values() if o.state is OrderState.REJECTED
        )
        in_flight = sum(
            1 for o in self._orders.values() if o.state not in TERMINAL_STATES
        )
        accept_rate = 0
        if total:
            accept_rate = int(
                (Decimal(ready * 100) / total).quantize(Decimal("1"), ROUND_HALF_UP)
            )
        return DeskStats(
            total=total,
            ready=ready,
            rejected=rejected,
            in_flight=in_flight,
            accept_rate=accept_rate,
        )
