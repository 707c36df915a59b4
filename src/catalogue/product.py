"""Product variant model as read from the backing store.

Products reach this subsystem as rows written by the admin console, and those
rows carry three generations of stock layout side by side:

    * a flat ``stock`` integer,
    * a legacy comma-separated ``taille`` string whose sizes all share the
      flat counter,
    * a ``tailles`` array of ``{nom, stock}`` entries, one counter per size.

The same three shapes can appear on each color of a colored product.
``Product.from_record`` normalizes a row into a tagged union of
``FlatCounter`` and ``SizeKeyedCounter`` once, so nothing downstream has to
branch on raw row shapes again.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SizeStock:
    name: str
    stock: int


@dataclass(frozen=True)
class FlatCounter:
    """A single counter, optionally advertised under several legacy sizes."""

    stock: int
    legacy_sizes: tuple[str, ...] = ()

    def to_record(self) -> dict:
        return {
            "stock": self.stock,
            "taille": ", ".join(self.legacy_sizes) if self.legacy_sizes else None,
            "tailles": None,
        }


@dataclass(frozen=True)
class SizeKeyedCounter:
    """One counter per size name."""

    sizes: tuple[SizeStock, ...]

    def find(self, size: str) -> SizeStock | None:
        return next((s for s in self.sizes if s.name == size), None)

    def to_record(self) -> dict:
        return {
            "stock": sum(max(s.stock, 0) for s in self.sizes),
            "taille": None,
            "tailles": [{"nom": s.name, "stock": s.stock} for s in self.sizes],
        }


Counter = FlatCounter | SizeKeyedCounter


def parse_legacy_sizes(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def counter_from_record(record: dict) -> Counter:
    sizes = record.get("tailles")
    if isinstance(sizes, list) and sizes:
        return SizeKeyedCounter(
            sizes=tuple(SizeStock(name=str(s["nom"]), stock=int(s.get("stock") or 0)) for s in sizes)
        )
    return FlatCounter(
        stock=int(record.get("stock") or 0),
        legacy_sizes=parse_legacy_sizes(record.get("taille")),
    )


@dataclass(frozen=True)
class Color:
    name: str
    counter: Counter

    @classmethod
    def from_record(cls, record: dict) -> "Color":
        return cls(name=str(record["nom"]), counter=counter_from_record(record))

    def to_record(self) -> dict:
        return {"nom": self.name, **self.counter.to_record()}


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    has_colors: bool = False
    counter: Counter = field(default_factory=lambda: FlatCounter(stock=0))
    colors: tuple[Color, ...] = ()
    image_url: str | None = None

    def color(self, name: str) -> Color | None:
        """Find a color by exact (case-sensitive) name."""
        return next((c for c in self.colors if c.name == name), None)

    @classmethod
    def from_record(cls, record: dict) -> "Product":
        has_colors = bool(record.get("has_colors"))
        colors = record.get("couleurs") if has_colors else None
        return cls(
            id=str(record["id"]),
            name=str(record.get("nom") or record["id"]),
            price=float(record.get("prix") or 0.0),
            has_colors=has_colors,
            counter=counter_from_record(record),
            colors=tuple(Color.from_record(c) for c in colors or [] if isinstance(c, dict)),
            image_url=record.get("image_url"),
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "nom": self.name,
            "prix": self.price,
            "image_url": self.image_url,
            "has_colors": self.has_colors,
            **self.counter.to_record(),
            "couleurs": [c.to_record() for c in self.colors] if self.has_colors else None,
        }
