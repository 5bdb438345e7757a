"""Request/response boundary around the validation engine."""

from tradeflow.api.client import EngineClient, LocalEngineClient, RouteEngineClient
from tradeflow.api.validate_order import (
    ApiResponse,
    ValidateOrderRequest,
    handle_validate_order,
    intent_to_payload,
    parse_order_request,
)

__all__ = [
    "ApiResponse",
    "EngineClient",
    "LocalEngineClient",
    "RouteEngineClient",
    "ValidateOrderRequest",
    "handle_validate_order",
    "intent_to_payload",
    "parse_order_request",
]
