"""Engine clients -- how the order desk reaches the validation engine.

Both clients are async so the desk can treat the engine as a remote
round trip. Any failure surfaces as ValidationEngineError.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from tradeflow.api.validate_order import handle_validate_order, intent_to_payload
from tradeflow.errors import EngineResponseError, ValidationEngineError
from tradeflow.orders.types import OrderIntent, ValidationResult
from tradeflow.risk.validation import validate


@runtime_checkable
class EngineClient(Protocol):
    """Anything that can validate an intent asynchronously."""

    async def __call__(self, intent: OrderIntent) -> ValidationResult: ...


class LocalEngineClient:
    """Calls the engine function directly, in-process."""

    def __init__(
        self,
        validator: Callable[[OrderIntent], ValidationResult] = validate,
    ) -> None:
        self._validator = validator

    async def __call__(self, intent: OrderIntent) -> ValidationResult:
        try:
            return self._validator(intent)
        except Exception as exc:
            raise ValidationEngineError(str(exc)) from exc


class RouteEngineClient:
    """Goes through the request/response boundary, as the entry screen does.

    The intent is serialized to a request mapping and the JSON body is
    parsed back into a ValidationResult.
    """

    def __init__(
        self,
        validator: Callable[[OrderIntent], ValidationResult] = validate,
    ) -> None:
        self._validator = validator

    async def __call__(self, intent: OrderIntent) -> ValidationResult:
        response = handle_validate_order(intent_to_payload(intent), self._validator)
        if not response.ok:
            raise EngineResponseError(
                response.status_code,
                str(response.body.get("error", "")),
            )
        try:
            return ValidationResult.from_dict(response.body)
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationEngineError(f"Malformed engine response: {exc}") from exc
