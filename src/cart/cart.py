"""Client-held shopping cart.

The cart lives in the browser's storage between visits, so it serializes to
plain JSON. Each line caches the last stock figure the storefront observed;
that ``stock`` hint only drives the quantity picker and is never trusted by
checkout.
"""

import json
from dataclasses import asdict, dataclass, field


@dataclass
class CartLine:
    product_id: str
    name: str
    price: float
    quantity: int
    color: str | None = None
    size: str | None = None
    image_url: str | None = None
    stock: int | None = None

    def matches(self, product_id: str, color: str | None, size: str | None) -> bool:
        return self.product_id == product_id and self.color == (color or None) and self.size == (size or None)

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


@dataclass
class LocalCart:
    lines: list[CartLine] = field(default_factory=list)

    def find(self, product_id: str, color: str | None = None, size: str | None = None) -> CartLine | None:
        return next((line for line in self.lines if line.matches(product_id, color, size)), None)

    def lines_for(self, product_id: str) -> list[CartLine]:
        return [line for line in self.lines if line.product_id == product_id]

    def remove(self, product_id: str, color: str | None = None, size: str | None = None) -> None:
        """Drop a line. Removal never needs a stock check."""
        self.lines = [line for line in self.lines if not line.matches(product_id, color, size)]

    def clear(self) -> None:
        self.lines = []

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> float:
        return sum(line.subtotal for line in self.lines)

    def to_order_lines(self) -> list[dict]:
        """Lines in the shape the checkout endpoint accepts."""
        return [
            {
                "id": line.product_id,
                "nom": line.name,
                "prix": line.price,
                "quantite": line.quantity,
                "image_url": line.image_url,
                "couleur": line.color,
                "taille": line.size,
            }
            for line in self.lines
        ]

    def to_json(self) -> str:
        return json.dumps([asdict(line) for line in self.lines])

    @classmethod
    def from_json(cls, raw: str | None) -> "LocalCart":
        """Rebuild a cart from storage; unreadable data yields an empty cart.

        Lines written by an older cart format (unknown or missing fields) are
        dropped one by one so the rest of the cart survives.
        """
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except ValueError:
            return cls()
        if not isinstance(data, list):
            return cls()

        lines = []
        for stored in data:
            if not isinstance(stored, dict):
                continue
            try:
                lines.append(CartLine(**stored))
            except TypeError:
                continue
        return cls(lines=lines)
