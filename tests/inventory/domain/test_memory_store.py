"""Tests for the in-memory stock store's conditional adjust."""

import threading

import pytest
from catalogue.product import Product
from inventory.keys import StockKey
from inventory.store.memory_adapter import InMemoryStockStore


@pytest.fixture()
def store(stock_store, catalogue_rows):
    return stock_store


class TestAdjust:
    def test_decrement_flat(self, store, rows):
        assert store.adjust(StockKey(rows.chair_id), -2) is True
        assert store.fetch_product(rows.chair_id).counter.stock == 1

    def test_decrement_to_zero(self, store, rows):
        assert store.adjust(StockKey(rows.chair_id), -3) is True
        assert store.fetch_product(rows.chair_id).counter.stock == 0

    def test_insufficient_leaves_counter(self, store, rows):
        assert store.adjust(StockKey(rows.chair_id), -4) is False
        assert store.fetch_product(rows.chair_id).counter.stock == 3

    def test_color_size_counter(self, store, rows):
        assert store.adjust(StockKey(rows.sneaker_id, color="Noir", size="43"), -1) is True

        noir = store.fetch_product(rows.sneaker_id).color("Noir")
        assert noir.counter.find("43").stock == 3
        assert noir.counter.find("42").stock == 1

    def test_color_flat_counter(self, store, rows):
        assert store.adjust(StockKey(rows.sneaker_id, color="Blanc"), -5) is True
        assert store.fetch_product(rows.sneaker_id).color("Blanc").counter.stock == 0

    def test_product_size_counter(self, store, rows):
        assert store.adjust(StockKey(rows.stool_id, size="S"), -1) is True
        assert store.fetch_product(rows.stool_id).counter.find("S").stock == 1

    def test_increment_is_unconditional(self, store, rows):
        assert store.adjust(StockKey(rows.stool_id, size="L"), 3) is True
        assert store.fetch_product(rows.stool_id).counter.find("L").stock == 3

    @pytest.mark.parametrize(
        "key",
        [
            StockKey("00000000-0000-4000-8000-000000000000"),
            StockKey("7c2e8e5f-9b73-4d4f-8a1b-2d3e4f5a6b72", color="Rouge"),
            StockKey("7c2e8e5f-9b73-4d4f-8a1b-2d3e4f5a6b72", color="Noir", size="44"),
        ],
    )
    def test_missing_counter(self, store, key):
        assert store.adjust(key, -1) is False
        assert store.adjust(key, 1) is False

    def test_flat_key_never_hits_size_keyed_holder(self, store, rows):
        assert store.adjust(StockKey(rows.sneaker_id, color="Noir"), 1) is False
        assert store.adjust(StockKey(rows.stool_id), -1) is False

    def test_size_key_never_hits_flat_holder(self, store, rows):
        assert store.adjust(StockKey(rows.sandal_id, size="39"), -1) is False
        assert store.fetch_product(rows.sandal_id).counter.stock == 4

    def test_other_colors_untouched(self, store, rows):
        store.adjust(StockKey(rows.sneaker_id, color="Blanc"), -1)
        noir = store.fetch_product(rows.sneaker_id).color("Noir")
        assert noir.counter.find("42").stock == 1


class TestConcurrency:
    def test_parallel_decrements_never_oversell(self, rows):
        store = InMemoryStockStore()
        store.save_product(Product.from_record(rows.chair(stock=5)))
        results = []
        barrier = threading.Barrier(20)

        def buy():
            barrier.wait()
            results.append(store.adjust(StockKey(rows.chair_id), -1))

        threads = [threading.Thread(target=buy) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 5
        assert store.fetch_product(rows.chair_id).counter.stock == 0
