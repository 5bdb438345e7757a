"""Order domain types shared across validation and lifecycle.

Frozen dataclasses for value objects, a mutable dataclass for the
Order aggregate. Quantities and prices use Decimal (never float).
Enum values are the upper-case spellings used on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from tradeflow.utils.time import format_timestamp, utc_now


class Instrument(str, Enum):
    """Traded product category."""

    INDEX = "INDEX"
    FUTURES = "FUTURES"
    EQUITY = "EQUITY"


class OrderType(str, Enum):
    """Supported order types."""

    MARKET = "MARKET"
    LIMIT = "LIMIT"


class Strategy(str, Enum):
    """Strategy tag attached to an order."""

    MOMENTUM = "MOMENTUM"
    MEAN_REVERSION = "MEAN_REVERSION"
    ARBITRAGE = "ARBITRAGE"
    DELTA_NEUTRAL = "DELTA_NEUTRAL"
    CUSTOM = "CUSTOM"


class OrderState(str, Enum):
    """Order lifecycle states."""

    CREATED = "CREATED"
    VALIDATED = "VALIDATED"
    RISK_APPROVED = "RISK_APPROVED"
    READY = "READY"
    REJECTED = "REJECTED"


TERMINAL_STATES = frozenset(
    {
        OrderState.READY,
        OrderState.REJECTED,
    }
)


# --- Value Objects (frozen) ---


@dataclass(frozen=True)
class OrderIntent:
    """What the trader asked for. Built once per submission."""

    instrument: Instrument
    order_type: OrderType
    quantity: Decimal
    strategy: Strategy
    price: Decimal | None = None


@dataclass(frozen=True)
class ValidationStep:
    """Outcome of a single risk rule."""

    check: str
    passed: bool
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {"check": self.check, "passed": self.passed, "detail": self.detail}


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of one validation pass.

    ``rejection_reason`` is set if and only if ``passed`` is False.
    """

    passed: bool
    steps: tuple[ValidationStep, ...]
    rejection_reason: str | None = None

    def __post_init__(self) -> None:
        if self.passed and self.rejection_reason is not None:
            raise ValueError("A passed result cannot carry a rejection reason")
        if not self.passed and not self.rejection_reason:
            raise ValueError("A failed result requires a rejection reason")

    @property
    def failed_checks(self) -> list[str]:
        return [s.check for s in self.steps if not s.passed]

    def to_dict(self) -> dict[str, Any]:
        """Outbound JSON shape. ``rejectionReason`` is omitted on pass."""
        body: dict[str, Any] = {
            "passed": self.passed,
            "steps": [s.to_dict() for s in self.steps],
        }
        if self.rejection_reason is not None:
            body["rejectionReason"] = self.rejection_reason
        return body

    @classmethod
    def from_dict(cls, body: dict[str, Any]) -> ValidationResult:
        """Inverse of to_dict(), for results received over the boundary."""
        return cls(
            passed=bool(body["passed"]),
            steps=tuple(
                ValidationStep(
                    check=str(s["check"]),
                    passed=bool(s["passed"]),
                    detail=str(s["detail"]),
                )
                for s in body["steps"]
            ),
            rejection_reason=body.get("rejectionReason"),
        )


@dataclass(frozen=True)
class StateTransition:
    """One entry of an order's append-only transition log."""

    from_state: OrderState
    to_state: OrderState
    timestamp: datetime
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "from": self.from_state.value,
            "to": self.to_state.value,
            "timestamp": format_timestamp(self.timestamp),
        }
        if self.note is not None:
            body["note"] = self.note
        return body


# --- Aggregate (mutable) ---


@dataclass
class Order:
    """Order aggregate.

    Owned by an OrderStore; mutated only through
    OrderStore.apply_transition().
    """

    id: str
    instrument: Instrument
    order_type: OrderType
    quantity: Decimal
    strategy: Strategy
    price: Decimal | None = None
    state: OrderState = OrderState.CREATED
    validation_steps: tuple[ValidationStep, ...] = ()
    transitions: list[StateTransition] = field(default_factory=list)
    rejection_reason: str | None = None
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(
        cls,
        intent: OrderIntent,
        *,
        order_id: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """New order in CREATED with an empty transition log."""
        return cls(
            id=order_id or str(uuid4()),
            instrument=intent.instrument,
            order_type=intent.order_type,
            quantity=intent.quantity,
            strategy=intent.strategy,
            price=intent.price,
            created_at=now or utc_now(),
        )

    @property
    def intent(self) -> OrderIntent:
        return OrderIntent(
            instrument=self.instrument,
            order_type=self.order_type,
            quantity=self.quantity,
            strategy=self.strategy,
            price=self.price,
        )

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> dict[str, Any]:
        """Outbound shape consumed by the presentation layer."""
        body: dict[str, Any] = {
            "id": self.id,
            "instrument": self.instrument.value,
            "orderType": self.order_type.value,
            "quantity": str(self.quantity),
            "strategy": self.strategy.value,
            "state": self.state.value,
            "validationSteps": [s.to_dict() for s in self.validation_steps],
            "transitions": [t.to_dict() for t in self.transitions],
            "createdAt": format_timestamp(self.created_at),
        }
        if self.price is not None:
            body["price"] = str(self.price)
        if self.rejection_reason is not None:
            body["rejectionReason"] = self.rejection_reason
        return body
