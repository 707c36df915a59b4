"""Integration tests for the SQLAlchemy stock store (file-backed SQLite)."""

import threading

import pytest
from catalogue.product import Product
from inventory import protocol
from inventory.keys import StockKey
from inventory.store import set_store
from inventory.store.sql_adapter import SQLStockStore, drop_tables, setup_tables
from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'stock.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    setup_tables(engine)
    yield engine
    drop_tables(engine)
    engine.dispose()


@pytest.fixture()
def sql_store(engine, rows):
    store = SQLStockStore(engine)
    for record in (rows.chair(), rows.sneaker(), rows.sandal(), rows.stool()):
        store.save_product(Product.from_record(record))
    set_store(store)
    return store


class TestPersistence:
    def test_round_trips_every_layout(self, sql_store, rows):
        for record in (rows.chair(), rows.sneaker(), rows.sandal(), rows.stool()):
            assert sql_store.fetch_product(record["id"]) == Product.from_record(record)

    def test_unknown_product(self, sql_store, rows):
        assert sql_store.fetch_product(rows.unknown_id) is None

    def test_save_replaces_existing_rows(self, sql_store, rows):
        sql_store.save_product(Product.from_record(rows.sneaker(noir_42=9)))

        product = sql_store.fetch_product(rows.sneaker_id)
        assert product.color("Noir").counter.find("42").stock == 9
        assert len(product.colors) == 2


class TestConditionalUpdate:
    def test_flat(self, sql_store, rows):
        assert sql_store.adjust(StockKey(rows.chair_id), -3) is True
        assert sql_store.adjust(StockKey(rows.chair_id), -1) is False
        assert sql_store.fetch_product(rows.chair_id).counter.stock == 0

    def test_color_and_size(self, sql_store, rows):
        assert sql_store.adjust(StockKey(rows.sneaker_id, color="Noir", size="43"), -4) is True
        noir = sql_store.fetch_product(rows.sneaker_id).color("Noir")
        assert noir.counter.find("43").stock == 0
        assert noir.counter.find("42").stock == 1

    def test_color(self, sql_store, rows):
        assert sql_store.adjust(StockKey(rows.sneaker_id, color="Blanc"), -2) is True
        assert sql_store.fetch_product(rows.sneaker_id).color("Blanc").counter.stock == 3

    def test_product_size(self, sql_store, rows):
        assert sql_store.adjust(StockKey(rows.stool_id, size="L"), -1) is False
        assert sql_store.adjust(StockKey(rows.stool_id, size="L"), 2) is True
        assert sql_store.fetch_product(rows.stool_id).counter.find("L").stock == 2

    def test_flat_key_skips_size_keyed_holder(self, sql_store, rows):
        assert sql_store.adjust(StockKey(rows.sneaker_id, color="Noir"), -1) is False
        assert sql_store.adjust(StockKey(rows.stool_id), 1) is False

    def test_missing_counter(self, sql_store, rows):
        assert sql_store.adjust(StockKey(rows.unknown_id), 1) is False
        assert sql_store.adjust(StockKey(rows.sneaker_id, color="Rouge", size="42"), 1) is False

    def test_protocol_runs_against_sql_store(self, sql_store, rows):
        assert protocol.decrement_by_color_and_size(rows.sneaker_id, "Noir", "42", 1) is True
        assert protocol.decrement_by_color_and_size(rows.sneaker_id, "Noir", "42", 1) is False
        assert protocol.increment_by_color_and_size(rows.sneaker_id, "Noir", "42", 1) is True


class TestSchema:
    def test_check_constraint_rejects_negative_stock(self, sql_store, engine, rows):
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(text("UPDATE products SET stock = -1 WHERE id = :id"), {"id": rows.chair_id})


class TestConcurrency:
    def test_parallel_decrements_never_oversell(self, sql_store, rows):
        results = []
        lock = threading.Lock()
        barrier = threading.Barrier(12)

        def buy():
            barrier.wait()
            applied = sql_store.adjust(StockKey(rows.sneaker_id, color="Noir", size="43"), -1)
            with lock:
                results.append(applied)

        threads = [threading.Thread(target=buy) for _ in range(12)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 4
        assert sql_store.fetch_product(rows.sneaker_id).color("Noir").counter.find("43").stock == 0
