import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def order_payload():
    """Checkout body builder; ``lines`` are (product_id, quantity, color, size)."""

    def _payload(*lines, **overrides):
        body = {
            "nom_client": "Amina Benali",
            "telephone": "0612345678",
            "email": "amina@example.com",
            "adresse": "12 rue des Orangers",
            "ville": "Casablanca",
            "produits": [
                {
                    "id": product_id,
                    "nom": "Article",
                    "prix": 1.0,
                    "quantite": quantity,
                    "couleur": color,
                    "taille": size,
                }
                for product_id, quantity, color, size in lines
            ],
        }
        body.update(overrides)
        return body

    return _payload
