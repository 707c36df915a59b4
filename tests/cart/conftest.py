import pytest


class StoreBackedClient:
    """Reads products straight from the stock store, counting fetches."""

    def __init__(self, store):
        self.store = store
        self.fetches = 0

    def fetch_product(self, product_id):
        from shared.errors import ProductNotFound

        self.fetches += 1
        product = self.store.fetch_product(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product


@pytest.fixture()
def stock_client(stock_store):
    return StoreBackedClient(stock_store)


@pytest.fixture()
def guard(stock_client):
    from cart.guard import CartStockGuard

    return CartStockGuard(stock_client)
