"""Click CLI commands for tradeflow."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from tradeflow.config import AppConfig
from tradeflow.errors import StructuralInputError
from tradeflow.orders.types import (
    Instrument,
    Order,
    OrderType,
    Strategy,
    ValidationResult,
    ValidationStep,
)
from tradeflow.utils.logging import setup_logging

if TYPE_CHECKING:
    from tradeflow.orders.store import DeskStats

_INSTRUMENTS = [i.value for i in Instrument]
_ORDER_TYPES = [t.value for t in OrderType]
_STRATEGIES = [s.value for s in Strategy]


def _order_options(func: Any) -> Any:
    """Shared order-intent options for validate and submit."""
    options = [
        click.option(
            "--instrument",
            type=click.Choice(_INSTRUMENTS, case_sensitive=False),
            help="Instrument category.",
        ),
        click.option(
            "--order-type",
            type=click.Choice(_ORDER_TYPES, case_sensitive=False),
            default="LIMIT",
            show_default=True,
            help="Order type.",
        ),
        click.option("--quantity", type=str, help="Order quantity (lots)."),
        click.option("--price", type=str, default=None, help="Limit price."),
        click.option(
            "--strategy",
            type=click.Choice(_STRATEGIES, case_sensitive=False),
            default="MOMENTUM",
            show_default=True,
            help="Strategy tag.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _payload(
    instrument: str | None,
    order_type: str | None,
    quantity: str | None,
    price: str | None,
    strategy: str | None,
) -> dict[str, Any]:
    return {
        "instrument": instrument.upper() if instrument else None,
        "orderType": order_type.upper() if order_type else None,
        "quantity": quantity,
        "price": price,
        "strategy": strategy.upper() if strategy else None,
    }


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Tradeflow: derivatives order validation and lifecycle simulator."""
    cfg = AppConfig()
    setup_logging(
        level=cfg.log_level,
        log_format=cfg.log_format,
        desk_name=cfg.simulation.desk_name,
    )
    ctx.obj = cfg


@cli.command()
@_order_options
@click.option("--json", "as_json", is_flag=True, help="Print the raw JSON result.")
def validate(
    instrument: str | None,
    order_type: str | None,
    quantity: str | None,
    price: str | None,
    strategy: str | None,
    as_json: bool,
) -> None:
    """Run the risk checks for one order without creating it."""
    from tradeflow.api.validate_order import handle_validate_order

    response = handle_validate_order(
        _payload(instrument, order_type, quantity, price, strategy)
    )
    if as_json:
        click.echo(json.dumps(response.body, indent=2))
    elif not response.ok:
        fields = ", ".join(response.body.get("fields", []))
        click.echo(f"{response.body['error']}: {fields}")
    else:
        result = ValidationResult.from_dict(response.body)
        _print_steps(list(result.steps))
        click.echo(f"\nVerdict: {'PASSED' if result.passed else 'FAILED'}")
        if result.rejection_reason is not None:
            click.echo(f"Reason:  {result.rejection_reason}")
    if not response.ok:
        sys.exit(1)


@cli.command()
@_order_options
@click.option(
    "--batch",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file holding a list of order requests.",
)
@click.pass_obj
def submit(
    cfg: AppConfig,
    instrument: str | None,
    order_type: str | None,
    quantity: str | None,
    price: str | None,
    strategy: str | None,
    batch: Path | None,
) -> None:
    """Submit orders through a simulated desk and show their lifecycle."""
    if batch is not None:
        try:
            payloads = json.loads(batch.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise click.ClickException(f"Invalid batch file: {e}") from e
        if not isinstance(payloads, list):
            raise click.ClickException("Batch file must contain a JSON list")
    else:
        payloads = [_payload(instrument, order_type, quantity, price, strategy)]

    orders, errors, stats = asyncio.run(_run_submissions(cfg, payloads))

    for order in orders:
        _print_order(order)
    for index, message in errors:
        click.echo(f"\nRequest #{index + 1} not submitted: {message}")

    if orders:
        click.echo(
            f"\nTotal: {stats.total}  Ready: {stats.ready}  "
            f"Rejected: {stats.rejected}  Accept Rate: {stats.accept_rate}%"
        )
    if errors and not orders:
        sys.exit(1)


async def _run_submissions(
    cfg: AppConfig,
    payloads: list[Any],
) -> tuple[list[Order], list[tuple[int, str]], DeskStats]:
    from tradeflow.orders.lifecycle import OrderDesk

    desk = OrderDesk.from_config(cfg.simulation)
    orders: list[Order] = []
    errors: list[tuple[int, str]] = []
    for index, payload in enumerate(payloads):
        if not isinstance(payload, dict):
            errors.append((index, "request must be a JSON object"))
            continue
        try:
            orders.append(await desk.submit(payload))
        except StructuralInputError as e:
            errors.append((index, str(e)))
    return orders, errors, desk.store.stats()


def _print_steps(steps: list[ValidationStep]) -> None:
    for step in steps:
        mark = "PASS" if step.passed else "FAIL"
        click.echo(f"  [{mark}] {step.check:<22} {step.detail}")


def _print_order(order: Order) -> None:
    price = f"{order.price:,f}" if order.price is not None else "-"
    click.echo(f"\nOrder {order.id[:8].upper()}  {order.state.value}")
    click.echo(
        f"  {order.instrument.value} {order.order_type.value} "
        f"qty={order.quantity:,f} px={price} strategy={order.strategy.value}"
    )
    if order.rejection_reason:
        click.echo(f"  Rejected: {order.rejection_reason}")

    if order.validation_steps:
        click.echo("\nValidation Checks:")
        _print_steps(list(order.validation_steps))

    click.echo("\nTransition History:")
    for t in order.transitions:
        note = f"  ({t.note})" if t.note else ""
        click.echo(
            f"  {t.timestamp:%H:%M:%S.%f}  "
            f"{t.from_state.value} -> {t.to_state.value}{note}"
        )


@cli.command()
def limits() -> None:
    """Show the desk risk-rule table."""
    from tradeflow.risk.rules import (
        MAX_DAILY_EXPOSURE_PCT,
        RISK_LIMITS,
        STRATEGY_RESTRICTIONS,
    )

    click.echo("=== Risk Limits ===\n")
    click.echo(
        f"{'Instrument':<10} {'Max Qty':>8} {'Max Notional':>14} "
        f"{'Price Range':>18} {'Daily Cap':>10}"
    )
    for instrument, lim in RISK_LIMITS.items():
        price_range = f"{lim.min_price}-{lim.max_price}"
        click.echo(
            f"{instrument.value:<10} {lim.max_quantity:>8} "
            f"{lim.max_notional:>14,} {price_range:>18} {lim.daily_cap:>10}"
        )

    click.echo(f"\nDaily exposure threshold: {MAX_DAILY_EXPOSURE_PCT * 100:.0f}%")
    click.echo("\n[Strategy Restrictions]")
    for strat, blocked in STRATEGY_RESTRICTIONS.items():
        if blocked:
            names = ", ".join(sorted(i.value for i in blocked))
            click.echo(f"  {strat.value:<15} blocked on {names}")


@cli.command()
@click.pass_obj
def config(cfg: AppConfig) -> None:
    """Show current configuration."""
    click.echo("=== Tradeflow Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo("")

    click.echo("[Simulation]")
    click.echo(f"  Desk:               {cfg.simulation.desk_name}")
    click.echo(f"  Risk Desk Delay:    {cfg.simulation.risk_desk_delay_ms} ms")
    click.echo(f"  Staging Delay:      {cfg.simulation.staging_delay_ms} ms")
    click.echo(f"  Reject Delay:       {cfg.simulation.reject_delay_ms} ms")
