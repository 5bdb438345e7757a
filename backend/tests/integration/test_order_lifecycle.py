"""Integration tests: request -> engine -> lifecycle -> blotter.

These tests wire OrderDesk to the engine through the request/response
boundary (RouteEngineClient) so the full validate-order round trip is
exercised for every submission.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from tradeflow.api.client import RouteEngineClient
from tradeflow.orders.lifecycle import OrderDesk, PlannedTransition
from tradeflow.orders.store import OrderStore
from tradeflow.orders.types import (
    Instrument,
    OrderIntent,
    OrderState,
    OrderType,
    Strategy,
    ValidationResult,
)
from tests.factories import make_payload, ticking_clock


def _route_desk(store: OrderStore, **kwargs: Any) -> OrderDesk:
    return OrderDesk(store, engine=RouteEngineClient(), **kwargs)


class TestAcceptedFlow:
    """Order passes every check and is staged."""

    async def test_equity_limit_order_reaches_ready(self, store: OrderStore) -> None:
        desk = _route_desk(store)
        order = await desk.submit(make_payload())

        assert order.state == OrderState.READY
        assert order.rejection_reason is None
        assert all(step.passed for step in order.validation_steps)
        assert [(t.from_state, t.to_state) for t in order.transitions] == [
            (OrderState.CREATED, OrderState.VALIDATED),
            (OrderState.VALIDATED, OrderState.RISK_APPROVED),
            (OrderState.RISK_APPROVED, OrderState.READY),
        ]
        assert [t.note for t in order.transitions] == [
            "All validation checks passed",
            "Risk desk sign-off (simulated)",
            "Order staged for execution",
        ]

    async def test_market_order_without_price(self, store: OrderStore) -> None:
        payload = make_payload(orderType="MARKET", quantity=50)
        del payload["price"]
        order = await _route_desk(store).submit(payload)

        assert order.state == OrderState.READY
        assert order.price is None


class TestRejectedFlow:
    """Order fails a check and stops at REJECTED."""

    async def test_restricted_strategy_is_rejected(self, store: OrderStore) -> None:
        order = await _route_desk(store).submit(
            make_payload(instrument="INDEX", quantity=10, price=5400, strategy="ARBITRAGE")
        )

        assert order.state == OrderState.REJECTED
        assert [t.to_state for t in order.transitions] == [
            OrderState.VALIDATED,
            OrderState.REJECTED,
        ]
        assert order.transitions[-1].note == "Failed risk checks"
        failed = [s.check for s in order.validation_steps if not s.passed]
        assert failed == ["Strategy Restriction"]
        assert order.rejection_reason == (
            'Strategy "ARBITRAGE" is restricted for INDEX orders.'
        )

    async def test_engine_500_rejects_without_validated(self, store: OrderStore) -> None:
        def broken(intent: OrderIntent) -> ValidationResult:
            raise RuntimeError("engine crashed")

        desk = OrderDesk(store, engine=RouteEngineClient(validator=broken))
        order = await desk.submit(make_payload())

        assert order.state == OrderState.REJECTED
        assert [t.to_state for t in order.transitions] == [OrderState.REJECTED]
        assert order.transitions[0].note == "API error during validation"
        assert order.rejection_reason == "Internal validation error."


class TestBlotter:
    """Several submissions share one store."""

    async def test_stats_and_ordering(self, store: OrderStore) -> None:
        desk = _route_desk(store)
        first = await desk.submit(make_payload())
        second = await desk.submit(make_payload(instrument="FUTURES", strategy="CUSTOM"))
        third = await desk.submit(make_payload(quantity=9000))

        assert [o.id for o in store.orders] == [third.id, second.id, first.id]
        stats = store.stats()
        assert (stats.total, stats.ready, stats.rejected, stats.in_flight) == (3, 1, 2, 0)
        assert stats.accept_rate == 33

    async def test_concurrent_submissions(self, store: OrderStore) -> None:
        async def yield_control(step: PlannedTransition) -> None:
            await asyncio.sleep(0)

        desk = _route_desk(store, pause=yield_control)
        orders = await asyncio.gather(
            *(desk.submit(make_payload(quantity=q)) for q in (100, 200, 6000))
        )

        assert [o.state for o in orders] == [
            OrderState.READY,
            OrderState.READY,
            OrderState.REJECTED,
        ]
        assert len(store) == 3

    async def test_order_serializes_to_json(self, store: OrderStore) -> None:
        order = await _route_desk(store).submit(make_payload())
        body = json.loads(json.dumps(order.to_dict()))

        assert body["state"] == "READY"
        assert body["quantity"] == "200"
        assert body["price"] == "142"
        assert len(body["validationSteps"]) == 5
        assert [t["to"] for t in body["transitions"]] == [
            "VALIDATED",
            "RISK_APPROVED",
            "READY",
        ]
        assert "rejectionReason" not in body


_payloads = st.fixed_dictionaries(
    {
        "instrument": st.sampled_from([i.value for i in Instrument]),
        "orderType": st.sampled_from([t.value for t in OrderType]),
        "quantity": st.integers(min_value=1, max_value=6000),
        "strategy": st.sampled_from([s.value for s in Strategy]),
    },
    optional={"price": st.integers(min_value=1, max_value=60000)},
)


class TestLifecycleProperties:
    """Invariants that hold for any well-formed submission."""

    @given(payload=_payloads)
    @settings(max_examples=150, deadline=None)
    def test_every_submission_ends_consistent(self, payload: dict[str, Any]) -> None:
        clock = ticking_clock()
        store = OrderStore(clock=lambda: next(clock))
        order = asyncio.run(_route_desk(store).submit(payload))

        assert order.state in (OrderState.READY, OrderState.REJECTED)
        assert order.state == order.transitions[-1].to_state
        assert order.transitions[0].from_state == OrderState.CREATED
        for prev, nxt in zip(order.transitions, order.transitions[1:], strict=False):
            assert prev.to_state == nxt.from_state
            assert prev.timestamp < nxt.timestamp

        if order.state == OrderState.READY:
            assert order.rejection_reason is None
            assert all(s.passed for s in order.validation_steps)
        else:
            assert order.rejection_reason
            assert not all(s.passed for s in order.validation_steps)
