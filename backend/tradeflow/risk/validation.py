"""Validation engine -- pure risk checks, no I/O.

Evaluates an OrderIntent against the fixed risk-rule table. All five
checks always run (no fail-fast) so the caller can show the complete
checklist. Business failures are returned as data, never raised.
"""

from __future__ import annotations

from decimal import Decimal, Overflow, localcontext

from tradeflow.orders.types import OrderIntent, OrderType, ValidationResult, ValidationStep
from tradeflow.risk.rules import (
    CHECK_EXPOSURE,
    CHECK_NOTIONAL,
    CHECK_PRICE,
    CHECK_QUANTITY,
    CHECK_STRATEGY,
    MAX_DAILY_EXPOSURE_PCT,
    REASON_PRIORITY,
    is_restricted,
    limits_for,
)

# (step, reason used if this step ends up chosen as the rejection reason)
_CheckOutcome = tuple[ValidationStep, str]

_ZERO = Decimal("0")


def _num(value: Decimal) -> str:
    return format(value, "f")


def _money(value: Decimal) -> str:
    return f"${value:,f}"


def check_quantity(intent: OrderIntent) -> _CheckOutcome:
    """1. Quantity must be positive and within the instrument max."""
    inst = intent.instrument.value
    max_qty = limits_for(intent.instrument).max_quantity
    passed = _ZERO < intent.quantity <= max_qty
    qty = _num(intent.quantity)
    if passed:
        detail = f"Quantity {qty} within allowed max of {max_qty} for {inst}"
    else:
        detail = f"Quantity {qty} exceeds max of {max_qty} for {inst}"
    reason = f"Quantity {qty} is out of bounds for {inst}."
    return ValidationStep(CHECK_QUANTITY, passed, detail), reason


def check_price(intent: OrderIntent) -> _CheckOutcome:
    """2. Limit price must fall inside the instrument's range (inclusive).

    Market orders pass without a numeric check. A limit order with no
    price is evaluated as price 0.
    """
    if intent.order_type is OrderType.MARKET:
        step = ValidationStep(
            CHECK_PRICE, True, "Market order - no price sanity check required"
        )
        return step, ""

    inst = intent.instrument.value
    limits = limits_for(intent.instrument)
    price = intent.price if intent.price is not None else _ZERO
    passed = limits.min_price <= price <= limits.max_price
    if passed:
        detail = (
            f"Limit price {_num(price)} within valid range "
            f"[{limits.min_price}, {limits.max_price}]"
        )
    else:
        detail = (
            f"Limit price {_num(price)} outside valid range "
            f"[{limits.min_price}, {limits.max_price}] for {inst}"
        )
    reason = f"Limit price {_num(price)} is outside the acceptable range for {inst}."
    return ValidationStep(CHECK_PRICE, passed, detail), reason


def check_notional(intent: OrderIntent) -> _CheckOutcome:
    """3. quantity x price must not exceed the instrument notional cap.

    Deferred to execution time for market orders.
    """
    if intent.order_type is OrderType.MARKET:
        step = ValidationStep(
            CHECK_NOTIONAL, True, "Market order - notional checked at execution"
        )
        return step, ""

    price = intent.price if intent.price is not None else _ZERO
    notional = intent.quantity * price
    max_notional = limits_for(intent.instrument).max_notional
    passed = notional <= max_notional
    if passed:
        detail = f"Notional {_money(notional)} within cap of {_money(max_notional)}"
    else:
        detail = f"Notional {_money(notional)} exceeds cap of {_money(max_notional)}"
    reason = f"Order notional ({_money(notional)}) exceeds risk cap."
    return ValidationStep(CHECK_NOTIONAL, passed, detail), reason


def check_strategy(intent: OrderIntent) -> _CheckOutcome:
    """4. Strategy must not be blocked for the instrument by desk policy."""
    inst = intent.instrument.value
    strat = intent.strategy.value
    passed = not is_restricted(intent.strategy, intent.instrument)
    if passed:
        detail = f"Strategy {strat} is permitted for {inst}"
    else:
        detail = f"Strategy {strat} is not permitted on {inst} per desk policy"
    reason = f'Strategy "{strat}" is restricted for {inst} orders.'
    return ValidationStep(CHECK_STRATEGY, passed, detail), reason


def check_daily_exposure(intent: OrderIntent) -> _CheckOutcome:
    """5. Order size must stay within 15% of the instrument's daily lot cap."""
    cap = limits_for(intent.instrument).daily_cap
    exposure = intent.quantity / cap
    pct = exposure * 100
    passed = exposure <= MAX_DAILY_EXPOSURE_PCT
    if passed:
        detail = f"Order is {pct:.1f}% of daily cap (limit: 15%)"
    else:
        detail = f"Order is {pct:.1f}% of daily cap, exceeding the 15% threshold"
    reason = (
        f"Order size exceeds 15% of daily exposure cap "
        f"for {intent.instrument.value}."
    )
    return ValidationStep(CHECK_EXPOSURE, passed, detail), reason


_CHECKS = (
    check_quantity,
    check_price,
    check_notional,
    check_strategy,
    check_daily_exposure,
)


def validate(intent: OrderIntent) -> ValidationResult:
    """Run every risk check against ``intent``.

    Deterministic and side-effect free: the same intent always yields
    an equal result.
    """
    with localcontext() as ctx:
        # Out-of-range products become Infinity and fail their check
        ctx.traps[Overflow] = False
        outcomes = [check(intent) for check in _CHECKS]
    steps = tuple(step for step, _ in outcomes)
    passed = all(step.passed for step in steps)
    if passed:
        return ValidationResult(passed=True, steps=steps)

    reasons = {step.check: reason for step, reason in outcomes if not step.passed}
    rejection_reason = next(reasons[name] for name in REASON_PRIORITY if name in reasons)
    return ValidationResult(
        passed=False,
        steps=steps,
        rejection_reason=rejection_reason,
    )
