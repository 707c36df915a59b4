"""HTTP client for the storefront's authoritative stock endpoint."""

import requests
import structlog
from catalogue.product import Product
from shared.errors import ProductNotFound

logger = structlog.get_logger(__name__)


class ProductStockClient:
    """Reads ``GET /api/produits/{id}/stock``.

    ``session`` can be any object with a requests-style ``get``; a plain
    ``requests.Session`` is created when omitted.
    """

    def __init__(self, base_url: str, session=None, timeout: float = 5.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def fetch_record(self, product_id: str) -> dict:
        resp = self.session.get(f"{self.base_url}/api/produits/{product_id}/stock", timeout=self.timeout)
        if resp.status_code == 404:
            raise ProductNotFound(product_id)
        resp.raise_for_status()
        return resp.json()["data"]

    def fetch_product(self, product_id: str) -> Product:
        record = self.fetch_record(product_id)
        logger.debug("Fetched product stock", product_id=product_id)
        return Product.from_record(record)
