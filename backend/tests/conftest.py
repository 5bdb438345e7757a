"""Shared test fixtures for tradeflow."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from tradeflow.orders.lifecycle import OrderDesk
from tradeflow.orders.store import OrderStore
from tradeflow.utils.logging import set_correlation_id
from tests.factories import ticking_clock


@pytest.fixture(autouse=True)
def _reset_correlation_id() -> Iterator[None]:
    set_correlation_id("")
    yield
    set_correlation_id("")


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers installed by setup_logging() during a test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    structlog.reset_defaults()


@pytest.fixture
def store() -> OrderStore:
    """Isolated store with a deterministic clock."""
    clock = ticking_clock()
    return OrderStore(clock=lambda: next(clock))


@pytest.fixture
def desk(store: OrderStore) -> OrderDesk:
    """Desk with the in-process engine and no pacing."""
    return OrderDesk(store)
