"""Variant paths naming a single stock counter."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StockKey:
    """Explicit key of one stock counter.

    The four shapes map onto the four counters a product can carry:

    ============  ============  =====================================
    color         size          counter
    ============  ============  =====================================
    None          None          product flat stock
    "Noir"        None          color flat stock
    None          "42"          product size entry
    "Noir"        "42"          color size entry
    ============  ============  =====================================
    """

    product_id: str
    color: str | None = None
    size: str | None = None

    def describe(self) -> str:
        label = str(self.product_id)
        if self.color:
            label += f" ({self.color})"
        if self.size:
            label += f" - Taille {self.size}"
        return label
