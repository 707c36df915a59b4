"""Cart stock guard — re-checks server stock before the cart grows.

Adding a line or raising a quantity fetches the product fresh, resolves the
requested variant and compares the result against everything already in the
cart that draws on the same counter. Lines of a legacy shared-size product
all draw on one counter, so their quantities are summed together.

Removals and decreases are never blocked. Checkout re-validates everything
regardless; the guard only keeps the customer from building a cart that is
certain to be refused.
"""

import structlog
from catalogue.product import Product
from catalogue.variants import ResolvedStock, resolve_stock
from shared.errors import InsufficientStock, StockUnavailable, VariantNotFound

from cart.cart import CartLine, LocalCart

logger = structlog.get_logger(__name__)


def _label(product: Product, color: str | None, size: str | None) -> str:
    label = f'"{product.name}"'
    if color:
        label += f" ({color})"
    if size:
        label += f" - Taille {size}"
    return label


class CartStockGuard:
    def __init__(self, client) -> None:
        self.client = client

    def add(
        self,
        cart: LocalCart,
        product_id: str,
        quantity: int = 1,
        color: str | None = None,
        size: str | None = None,
    ) -> CartLine:
        """Add ``quantity`` of a variant, merging with an existing line."""
        if quantity <= 0:
            raise ValueError(f"Quantity must be positive, got {quantity}")

        color, size = color or None, size or None
        product = self.client.fetch_product(product_id)
        resolved = resolve_stock(product, color=color, size=size)
        existing = cart.find(product_id, color, size)

        self._check(cart, product, resolved, color, size, requested=quantity)

        if existing is not None:
            existing.quantity += quantity
            line = existing
        else:
            line = CartLine(
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=quantity,
                color=color,
                size=size,
                image_url=product.image_url,
            )
            cart.lines.append(line)

        self._refresh_hints(cart, product, resolved)
        return line

    def update_quantity(
        self,
        cart: LocalCart,
        product_id: str,
        quantity: int,
        color: str | None = None,
        size: str | None = None,
    ) -> CartLine | None:
        """Set a line's quantity. Zero or less removes the line.

        Returns the updated line, or ``None`` when it was removed.
        """
        color, size = color or None, size or None
        line = cart.find(product_id, color, size)
        if line is None:
            raise KeyError(f"No cart line for {product_id} ({color}, {size})")

        if quantity <= 0:
            cart.remove(product_id, color, size)
            return None

        if quantity <= line.quantity:
            line.quantity = quantity
            return line

        product = self.client.fetch_product(product_id)
        resolved = resolve_stock(product, color=color, size=size)
        self._check(cart, product, resolved, color, size, requested=quantity - line.quantity)

        line.quantity = quantity
        self._refresh_hints(cart, product, resolved)
        return line

    def remove(self, cart: LocalCart, product_id: str, color: str | None = None, size: str | None = None) -> None:
        cart.remove(product_id, color or None, size or None)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _sharing_lines(self, cart: LocalCart, product: Product, resolved: ResolvedStock) -> list[CartLine]:
        """Cart lines of ``product`` that draw on the same counter."""
        sharing = []
        for line in cart.lines_for(product.id):
            try:
                key = resolve_stock(product, color=line.color, size=line.size).key
            except VariantNotFound:
                # Variant withdrawn since the line was added; checkout will refuse it.
                continue
            if key == resolved.key:
                sharing.append(line)
        return sharing

    def _check(
        self,
        cart: LocalCart,
        product: Product,
        resolved: ResolvedStock,
        color: str | None,
        size: str | None,
        requested: int,
    ) -> None:
        label = _label(product, color, size)
        if resolved.available == 0:
            raise StockUnavailable(f"{label} est en rupture de stock")

        in_cart = sum(line.quantity for line in self._sharing_lines(cart, product, resolved))
        if in_cart + requested > resolved.available:
            logger.info(
                "Cart quantity refused",
                product_id=product.id,
                counter=resolved.key.describe(),
                in_cart=in_cart,
                requested=requested,
                available=resolved.available,
            )
            raise InsufficientStock(
                f"Stock insuffisant pour {label}. Disponible: {resolved.available}",
                available=resolved.available,
            )

    def _refresh_hints(self, cart: LocalCart, product: Product, resolved: ResolvedStock) -> None:
        for line in self._sharing_lines(cart, product, resolved):
            line.stock = resolved.available
