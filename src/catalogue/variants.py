"""Variant resolver — locates the stock counter for a (color, size) request.

Resolution order, most specific first:

    1. size requested and the holder is size-keyed → that size's counter
    2. size requested and the holder lists legacy sizes → the holder's flat
       counter (sizes share it; the decrement cannot be size-precise)
    3. color/colorless mismatch → VariantNotFound
    4. nothing requested → the flat counter

The holder is the chosen color on colored products and the product itself
otherwise. The returned key decides which atomic operation checkout uses
later, so this order must not change.
"""

from dataclasses import dataclass

from inventory.keys import StockKey
from shared.errors import VariantNotFound

from catalogue.product import FlatCounter, Product, SizeKeyedCounter


@dataclass(frozen=True)
class ResolvedStock:
    available: int
    key: StockKey
    size_specific: bool


def resolve_stock(product: Product, color: str | None = None, size: str | None = None) -> ResolvedStock:
    if product.has_colors:
        if not color:
            raise VariantNotFound(f"Couleur requise pour {product.name}")
        selected = product.color(color)
        if selected is None:
            raise VariantNotFound(f'Couleur "{color}" non disponible pour {product.name}')
        counter = selected.counter
        label = f"{product.name} ({color})"
    else:
        if color:
            raise VariantNotFound(f'Couleur "{color}" non disponible pour {product.name}')
        counter = product.counter
        label = product.name

    if size:
        if isinstance(counter, SizeKeyedCounter):
            entry = counter.find(size)
            if entry is None:
                raise VariantNotFound(f'Taille "{size}" non disponible pour {label}')
            return ResolvedStock(
                available=max(entry.stock, 0),
                key=StockKey(product.id, color=color, size=size),
                size_specific=True,
            )
        if isinstance(counter, FlatCounter) and size in counter.legacy_sizes:
            return ResolvedStock(
                available=max(counter.stock, 0),
                key=StockKey(product.id, color=color),
                size_specific=False,
            )
        raise VariantNotFound(f'Taille "{size}" non disponible pour {label}')

    if isinstance(counter, SizeKeyedCounter):
        # The per-size entries are authoritative; the holder has no flat counter to debit.
        raise VariantNotFound(f"Taille requise pour {label}")

    return ResolvedStock(
        available=max(counter.stock, 0),
        key=StockKey(product.id, color=color),
        size_specific=False,
    )


def key_for_line(product_id: str, color: str | None, size: str | None, size_specific: bool) -> StockKey:
    """Rebuild the counter key recorded for an order line.

    Legacy shared-size lines were debited on the holder's flat counter, so the
    size is dropped unless the size-specific counter was used.
    """
    return StockKey(product_id, color=color or None, size=size if size_specific and size else None)
