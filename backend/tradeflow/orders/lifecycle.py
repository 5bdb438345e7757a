"""Order desk -- drives an order from CREATED to a terminal state.

The planner is pure: given a ValidationResult it returns the complete
list of transitions to apply. The desk applies that list to its store,
awaiting an injected pause between consecutive transitions. Pacing is
a presentation concern; the default pause returns immediately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from tradeflow.api.client import EngineClient, LocalEngineClient
from tradeflow.api.validate_order import parse_order_request
from tradeflow.config import SimulationConfig
from tradeflow.errors import EngineResponseError
from tradeflow.orders.store import OrderStore
from tradeflow.orders.types import (
    Order,
    OrderIntent,
    OrderState,
    ValidationResult,
    ValidationStep,
)
from tradeflow.utils.logging import correlation_scope

log = structlog.get_logger()

NOTE_VALIDATED_FAILED = "Validation engine processed"
NOTE_REJECTED = "Failed risk checks"
NOTE_VALIDATED_PASSED = "All validation checks passed"
NOTE_RISK_APPROVED = "Risk desk sign-off (simulated)"
NOTE_READY = "Order staged for execution"
NOTE_API_ERROR = "API error during validation"
NOTE_NETWORK_ERROR = "Network error"

REASON_API_ERROR = "Internal validation error."
REASON_UNREACHABLE = "Unable to reach validation engine."


@dataclass(frozen=True)
class PlannedTransition:
    """One transition the desk will apply."""

    to: OrderState
    note: str
    validation_steps: tuple[ValidationStep, ...] | None = None
    rejection_reason: str | None = None


Pause = Callable[[PlannedTransition], Awaitable[None]]


def plan_transitions(result: ValidationResult) -> list[PlannedTransition]:
    """Full transition sequence for an order whose validation ran.

    Rejected orders still pass through VALIDATED so the log shows the
    checks ran.
    """
    if not result.passed:
        return [
            PlannedTransition(
                OrderState.VALIDATED,
                NOTE_VALIDATED_FAILED,
                validation_steps=result.steps,
            ),
            PlannedTransition(
                OrderState.REJECTED,
                NOTE_REJECTED,
                rejection_reason=result.rejection_reason,
            ),
        ]
    return [
        PlannedTransition(
            OrderState.VALIDATED,
            NOTE_VALIDATED_PASSED,
            validation_steps=result.steps,
        ),
        PlannedTransition(OrderState.RISK_APPROVED, NOTE_RISK_APPROVED),
        PlannedTransition(OrderState.READY, NOTE_READY),
    ]


def plan_engine_failure(
    note: str = NOTE_NETWORK_ERROR,
    reason: str = REASON_UNREACHABLE,
) -> list[PlannedTransition]:
    """Straight CREATED -> REJECTED when the engine could not be used."""
    return [PlannedTransition(OrderState.REJECTED, note, rejection_reason=reason)]


async def no_pause(step: PlannedTransition) -> None:
    return None


def stage_delays(config: SimulationConfig) -> Pause:
    """Pause that sleeps the configured delay before each stage."""
    delays_ms = {
        OrderState.RISK_APPROVED: config.risk_desk_delay_ms,
        OrderState.READY: config.staging_delay_ms,
        OrderState.REJECTED: config.reject_delay_ms,
    }

    async def pause(step: PlannedTransition) -> None:
        delay_ms = delays_ms.get(step.to, 0)
        if delay_ms:
            await asyncio.sleep(delay_ms / 1000)

    return pause


class OrderDesk:
    """Submits orders: create, validate, then walk the planned transitions.

    Owns nothing globally; the store and the engine client are injected.
    """

    def __init__(
        self,
        store: OrderStore,
        engine: EngineClient | None = None,
        pause: Pause = no_pause,
    ) -> None:
        self._store = store
        self._engine: EngineClient = engine or LocalEngineClient()
        self._pause = pause

    @classmethod
    def from_config(
        cls,
        config: SimulationConfig,
        store: OrderStore | None = None,
        engine: EngineClient | None = None,
    ) -> OrderDesk:
        return cls(
            store if store is not None else OrderStore(),
            engine=engine,
            pause=stage_delays(config),
        )

    @property
    def store(self) -> OrderStore:
        return self._store

    async def submit(self, payload: Mapping[str, Any]) -> Order:
        """Submit a raw order request.

        Raises:
            StructuralInputError: If the request is missing required
                fields. No order is created in that case.
        """
        intent = parse_order_request(payload)
        return await self.submit_intent(intent)

    async def submit_intent(self, intent: OrderIntent) -> Order:
        """Create an order for ``intent`` and run it to a terminal state."""
        order = self._store.add(Order.create(intent))
        with correlation_scope(order.id):
            plan = await self._validate(order)
            await self._apply_plan(order.id, plan)

        if order.state is OrderState.REJECTED:
            log.info(
                "order_rejected",
                order_id=order.id,
                reason=order.rejection_reason,
            )
        elif order.state is OrderState.READY:
            log.info("order_ready", order_id=order.id)
        else:
            # Removed from the store mid-flight; remaining steps were ignored
            log.info("order_abandoned", order_id=order.id, state=order.state.value)
        return order

    async def _validate(self, order: Order) -> list[PlannedTransition]:
        try:
            result = await self._engine(order.intent)
        except EngineResponseError as exc:
            log.warning(
                "validation_engine_error_response",
                order_id=order.id,
                status_code=exc.status_code,
                error=exc.message,
            )
            return plan_engine_failure(NOTE_API_ERROR, REASON_API_ERROR)
        except Exception:
            log.exception("validation_engine_failed", order_id=order.id)
            return plan_engine_failure()
        return plan_transitions(result)

    async def _apply_plan(self, order_id: str, plan: list[PlannedTransition]) -> None:
        for i, step in enumerate(plan):
            if i > 0:
                await self._pause(step)
            self._store.apply_transition(
                order_id,
                step.to,
                note=step.note,
                validation_steps=step.validation_steps,
                rejection_reason=step.rejection_reason,
            )
