"""Stock store port (abstract interface).

The backing store owns the product rows and every stock counter inside them.
Adapters must implement ``adjust`` as ONE atomic conditional statement: a
read followed by a separate write would reintroduce the overselling race the
protocol exists to prevent.
"""

from abc import ABC, abstractmethod

from catalogue.product import Product

from inventory.keys import StockKey


class StockStore(ABC):
    """Abstract backing store for product rows and their stock counters."""

    @abstractmethod
    def fetch_product(self, product_id: str) -> Product | None:
        """Return the current product row, or None when it does not exist."""
        ...

    @abstractmethod
    def adjust(self, key: StockKey, delta: int) -> bool:
        """Atomically add ``delta`` to the counter named by ``key``.

        Negative deltas only apply when the counter holds at least ``-delta``.
        Returns False when the counter does not exist or the condition fails;
        the counter is left untouched in that case.
        """
        ...

    @abstractmethod
    def save_product(self, product: Product) -> None:
        """Insert or replace a product row with all its counters.

        Used by the admin console and fixtures; checkout never calls it.
        """
        ...
