"""Stock store factory.

Provides get_store() / set_store() to swap implementations:
- InMemoryStockStore for development and testing
- SQLStockStore when STOCK_DATABASE_URL is configured
"""

from shared.settings import stock_database_url

from inventory.store.memory_adapter import InMemoryStockStore
from inventory.store.port import StockStore

_current_store: StockStore | None = None


def get_store() -> StockStore:
    """Return the current stock store, building it from settings on first use."""
    global _current_store
    if _current_store is None:
        url = stock_database_url()
        if url:
            from inventory.store.sql_adapter import SQLStockStore

            _current_store = SQLStockStore.from_url(url, pool_pre_ping=True)
        else:
            _current_store = InMemoryStockStore()
    return _current_store


def set_store(store: StockStore) -> None:
    """Override the active stock store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    """Reset to the default store."""
    global _current_store
    _current_store = None
