"""In-memory stock store for development and testing.

Rows live in a dict guarded by one lock; ``adjust`` checks and writes inside
that lock, which gives the same per-counter atomicity the SQL adapter gets
from a conditional UPDATE. State is process-local, so this adapter is never
used when several workers serve traffic.
"""

import threading
from dataclasses import replace

from catalogue.product import Color, Counter, FlatCounter, Product, SizeKeyedCounter, SizeStock

from inventory.keys import StockKey
from inventory.store.port import StockStore


def _apply(counter: Counter, size: str | None, delta: int) -> Counter | None:
    """Return the counter with ``delta`` applied, or None if it cannot apply."""
    if size is None:
        if not isinstance(counter, FlatCounter):
            return None
        if delta < 0 and counter.stock < -delta:
            return None
        return replace(counter, stock=counter.stock + delta)

    if not isinstance(counter, SizeKeyedCounter):
        return None
    entry = counter.find(size)
    if entry is None or (delta < 0 and entry.stock < -delta):
        return None
    return SizeKeyedCounter(
        sizes=tuple(SizeStock(name=s.name, stock=s.stock + delta) if s.name == size else s for s in counter.sizes)
    )


class InMemoryStockStore(StockStore):
    """Process-local stock store."""

    def __init__(self) -> None:
        self._products: dict[str, Product] = {}
        self._lock = threading.Lock()

    def fetch_product(self, product_id: str) -> Product | None:
        return self._products.get(str(product_id))

    def save_product(self, product: Product) -> None:
        with self._lock:
            self._products[product.id] = product

    def adjust(self, key: StockKey, delta: int) -> bool:
        with self._lock:
            product = self._products.get(str(key.product_id))
            if product is None:
                return False

            if key.color is None:
                counter = _apply(product.counter, key.size, delta)
                if counter is None:
                    return False
                self._products[product.id] = replace(product, counter=counter)
                return True

            color = product.color(key.color)
            if color is None:
                return False
            counter = _apply(color.counter, key.size, delta)
            if counter is None:
                return False
            colors = tuple(Color(name=c.name, counter=counter) if c.name == key.color else c for c in product.colors)
            self._products[product.id] = replace(product, colors=colors)
            return True

    def clear(self) -> None:
        with self._lock:
            self._products.clear()
