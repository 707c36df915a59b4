import os
from pathlib import Path
from types import SimpleNamespace

import pytest

# Fixed product ids; checkout validates ids as UUIDs.
CHAIR_ID = "5b1d7d4e-8a62-4c3e-9f0a-1c2d3e4f5a61"
SNEAKER_ID = "7c2e8e5f-9b73-4d4f-8a1b-2d3e4f5a6b72"
SANDAL_ID = "8d3f9f60-ac84-4e50-9b2c-3e4f5a6b7c83"
STOOL_ID = "9e40a071-bd95-4f61-8c3d-4f5a6b7c8d94"
UNKNOWN_ID = "00000000-0000-4000-8000-000000000000"


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the configuration environment before any domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def stock_store():
    """A fresh in-memory stock store for every test."""
    from inventory.store import reset_store, set_store
    from inventory.store.memory_adapter import InMemoryStockStore

    store = InMemoryStockStore()
    set_store(store)
    yield store
    reset_store()


@pytest.fixture(autouse=True)
def notifier():
    from ordering.notifier import reset_notifier, set_notifier
    from ordering.notifier.fake_adapter import RecordingNotifier

    fake = RecordingNotifier()
    set_notifier(fake)
    yield fake
    reset_notifier()


@pytest.fixture(autouse=True)
def _reset_limiter():
    yield

    from ordering.ratelimit import reset_limiter

    reset_limiter()


# ---------------------------------------------------------------------------
# Product rows
# ---------------------------------------------------------------------------
def chair_record(stock=3):
    """Colorless product with a single flat counter."""
    return {"id": CHAIR_ID, "nom": "Chaise Atlas", "prix": 1200.0, "image_url": "/img/chaise.jpg", "stock": stock}


def sneaker_record(noir_42=1, noir_43=4, blanc=5):
    """Colored product: Noir is size-keyed, Blanc has a flat counter."""
    return {
        "id": SNEAKER_ID,
        "nom": "Basket Riad",
        "prix": 450.0,
        "image_url": "/img/basket.jpg",
        "has_colors": True,
        "couleurs": [
            {"nom": "Noir", "tailles": [{"nom": "42", "stock": noir_42}, {"nom": "43", "stock": noir_43}]},
            {"nom": "Blanc", "stock": blanc},
        ],
    }


def sandal_record(stock=4):
    """Legacy product: sizes listed in a string share one counter."""
    return {"id": SANDAL_ID, "nom": "Sandale Zagora", "prix": 250.0, "stock": stock, "taille": "38, 39, 40"}


def stool_record(small=2, large=0):
    """Colorless product with per-size counters."""
    return {
        "id": STOOL_ID,
        "nom": "Tabouret Fès",
        "prix": 300.0,
        "tailles": [{"nom": "S", "stock": small}, {"nom": "L", "stock": large}],
    }


@pytest.fixture()
def rows():
    """Product ids and row builders, for tests that need custom stock."""
    return SimpleNamespace(
        chair_id=CHAIR_ID,
        sneaker_id=SNEAKER_ID,
        sandal_id=SANDAL_ID,
        stool_id=STOOL_ID,
        unknown_id=UNKNOWN_ID,
        chair=chair_record,
        sneaker=sneaker_record,
        sandal=sandal_record,
        stool=stool_record,
    )


@pytest.fixture()
def add_product(stock_store):
    from catalogue.product import Product

    def _add(record):
        product = Product.from_record(record)
        stock_store.save_product(product)
        return product

    return _add


@pytest.fixture()
def catalogue_rows(add_product):
    """Seed one product of every stock layout."""
    return {
        "chair": add_product(chair_record()),
        "sneaker": add_product(sneaker_record()),
        "sandal": add_product(sandal_record()),
        "stool": add_product(stool_record()),
    }
