"""Inbound boundary for the validation engine.

Turns a raw request mapping into an OrderIntent, rejecting structurally
invalid requests before the engine runs, and wraps the engine call in
the same 200 / 400 / 500 outcomes the order-entry screen expects.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tradeflow.errors import MalformedRequestError, StructuralInputError
from tradeflow.orders.types import (
    Instrument,
    OrderIntent,
    OrderType,
    Strategy,
    ValidationResult,
)
from tradeflow.risk.validation import validate

log = structlog.get_logger()

REQUIRED_FIELDS: tuple[str, ...] = ("instrument", "orderType", "quantity", "strategy")

MISSING_FIELDS_ERROR = "Missing required fields"
INVALID_REQUEST_ERROR = "Invalid order request"
ENGINE_ERROR = "Validation engine error"

# Far above every instrument limit; larger values are rejected as malformed
MAX_REQUEST_AMOUNT = Decimal("1000000000000")


class ValidateOrderRequest(BaseModel):
    """Wire shape of an order-validation request."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    instrument: Instrument
    order_type: OrderType = Field(alias="orderType")
    quantity: Decimal = Field(gt=0, le=MAX_REQUEST_AMOUNT)
    price: Decimal | None = Field(default=None, gt=0, le=MAX_REQUEST_AMOUNT)
    strategy: Strategy

    def to_intent(self) -> OrderIntent:
        return OrderIntent(
            instrument=self.instrument,
            order_type=self.order_type,
            quantity=self.quantity,
            strategy=self.strategy,
            price=self.price,
        )


@dataclass(frozen=True)
class ApiResponse:
    """Status code plus JSON-serializable body."""

    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _is_blank(value: Any) -> bool:
    """Absent, empty or zero values count as missing."""
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (int, float, Decimal)):
        return value == 0
    return False


def _field(payload: Mapping[str, Any], name: str) -> Any:
    if name == "orderType" and name not in payload:
        return payload.get("order_type")
    return payload.get(name)


def parse_order_request(payload: Mapping[str, Any]) -> OrderIntent:
    """Build an OrderIntent from a request mapping.

    A zero or empty price is treated as no price.

    Raises:
        StructuralInputError: If a required field is missing or any
            field cannot be coerced to its type.
    """
    missing = [name for name in REQUIRED_FIELDS if _is_blank(_field(payload, name))]
    if missing:
        raise StructuralInputError(missing)

    data = {name: _field(payload, name) for name in REQUIRED_FIELDS}
    price = payload.get("price")
    data["price"] = None if _is_blank(price) else price

    try:
        request = ValidateOrderRequest.model_validate(data)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise MalformedRequestError(
            fields,
            f"{INVALID_REQUEST_ERROR}: {', '.join(fields)}",
        ) from exc
    return request.to_intent()


def intent_to_payload(intent: OrderIntent) -> dict[str, Any]:
    """Request mapping for ``intent`` (inverse of parse_order_request)."""
    payload: dict[str, Any] = {
        "instrument": intent.instrument.value,
        "orderType": intent.order_type.value,
        "quantity": str(intent.quantity),
        "strategy": intent.strategy.value,
    }
    if intent.price is not None:
        payload["price"] = str(intent.price)
    return payload


def handle_validate_order(
    payload: Mapping[str, Any],
    validator: Callable[[OrderIntent], ValidationResult] = validate,
) -> ApiResponse:
    """Validate one order request.

    Returns 400 for structural errors (the engine never runs), 500 if the
    engine raises, otherwise 200 with the ValidationResult body.
    """
    try:
        intent = parse_order_request(payload)
    except StructuralInputError as exc:
        log.info("order_request_rejected", fields=exc.missing_fields, error=str(exc))
        if isinstance(exc, MalformedRequestError):
            error = INVALID_REQUEST_ERROR
        else:
            error = MISSING_FIELDS_ERROR
        return ApiResponse(400, {"error": error, "fields": exc.missing_fields})

    try:
        result = validator(intent)
    except Exception:
        log.exception("validation_engine_failed", instrument=intent.instrument.value)
        return ApiResponse(500, {"error": ENGINE_ERROR})

    log.info(
        "order_validated",
        instrument=intent.instrument.value,
        passed=result.passed,
        failed_checks=result.failed_checks,
    )
    return ApiResponse(200, result.to_dict())
