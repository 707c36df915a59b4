"""Atomic decrement protocol — the only code path that writes stock counters.

``decrement`` and ``increment`` take an explicit ``StockKey`` and delegate to
the store's single-statement conditional update. The named helpers keep the
four variant paths readable at call sites:

    decrement_flat(product_id, qty)
    decrement_by_color(product_id, color, qty)
    decrement_by_size(product_id, size, qty)
    decrement_by_color_and_size(product_id, color, size, qty)

Insufficient stock is reported as ``False``, never raised. Backend faults
(connection loss and the like) still propagate so callers can log them.
"""

import structlog

from inventory.keys import StockKey
from inventory.store import get_store

logger = structlog.get_logger(__name__)


def _check_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise ValueError(f"Quantity must be positive, got {quantity}")


def decrement(key: StockKey, quantity: int) -> bool:
    """Remove ``quantity`` from the counter only if it holds at least that much."""
    _check_quantity(quantity)
    applied = get_store().adjust(key, -quantity)
    if not applied:
        logger.info("Conditional decrement rejected", key=key.describe(), quantity=quantity)
    return applied


def increment(key: StockKey, quantity: int) -> bool:
    """Add ``quantity`` back to the counter. Fails only if the counter is gone."""
    _check_quantity(quantity)
    applied = get_store().adjust(key, quantity)
    if not applied:
        logger.warning("Increment target counter not found", key=key.describe(), quantity=quantity)
    return applied


def decrement_flat(product_id: str, quantity: int) -> bool:
    return decrement(StockKey(product_id), quantity)


def decrement_by_color(product_id: str, color: str, quantity: int) -> bool:
    return decrement(StockKey(product_id, color=color), quantity)


def decrement_by_size(product_id: str, size: str, quantity: int) -> bool:
    return decrement(StockKey(product_id, size=size), quantity)


def decrement_by_color_and_size(product_id: str, color: str, size: str, quantity: int) -> bool:
    return decrement(StockKey(product_id, color=color, size=size), quantity)


def increment_flat(product_id: str, quantity: int) -> bool:
    return increment(StockKey(product_id), quantity)


def increment_by_color(product_id: str, color: str, quantity: int) -> bool:
    return increment(StockKey(product_id, color=color), quantity)


def increment_by_size(product_id: str, size: str, quantity: int) -> bool:
    return increment(StockKey(product_id, size=size), quantity)


def increment_by_color_and_size(product_id: str, color: str, size: str, quantity: int) -> bool:
    return increment(StockKey(product_id, color=color, size=size), quantity)
