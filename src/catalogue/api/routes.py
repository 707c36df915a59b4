"""FastAPI endpoints for the Catalogue domain — authoritative stock reads."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from inventory.store import get_store

product_router = APIRouter(prefix="/api/produits", tags=["produits"])


@product_router.get("/{product_id}/stock")
async def read_product_stock(product_id: str) -> JSONResponse:
    """Current stock record of one product, as the cart guard consumes it."""
    product = get_store().fetch_product(product_id)
    if product is None:
        return JSONResponse(status_code=404, content={"success": False, "error": "Produit introuvable"})
    return JSONResponse(content={"success": True, "data": product.to_record()})
