"""Relational stock store built on SQLAlchemy Core.

Every counter is a ``stock`` column on exactly one row:

    products         flat product counter (colorless, no size array)
    product_colors   flat color counter
    product_sizes    size counters; ``color`` is '' for product-level sizes

``adjust`` renders as a single ``UPDATE ... WHERE <key> AND stock >= :qty``
and reads success from the affected row count, so the row lock taken by the
UPDATE itself is the only synchronization checkout relies on.
"""

import structlog
from catalogue.product import Color, Counter, FlatCounter, Product, SizeKeyedCounter, SizeStock, parse_legacy_sizes
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Engine,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    and_,
    create_engine,
    delete,
    false,
    insert,
    select,
    update,
)

from inventory.keys import StockKey
from inventory.store.port import StockStore

logger = structlog.get_logger(__name__)

PRODUCT_LEVEL = ""

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("price", Float, nullable=False),
    Column("image_url", String(500)),
    Column("has_colors", Boolean, nullable=False, default=False),
    Column("size_keyed", Boolean, nullable=False, default=False),
    Column("stock", Integer),
    Column("legacy_sizes", String(255)),
    CheckConstraint("stock IS NULL OR stock >= 0", name="ck_products_stock"),
)

product_colors = Table(
    "product_colors",
    metadata,
    Column("product_id", String(36), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("name", String(100), primary_key=True),
    Column("position", Integer, nullable=False, default=0),
    Column("size_keyed", Boolean, nullable=False, default=False),
    Column("stock", Integer),
    Column("legacy_sizes", String(255)),
    CheckConstraint("stock IS NULL OR stock >= 0", name="ck_product_colors_stock"),
)

product_sizes = Table(
    "product_sizes",
    metadata,
    Column("product_id", String(36), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("color", String(100), primary_key=True),
    Column("name", String(50), primary_key=True),
    Column("position", Integer, nullable=False, default=0),
    Column("stock", Integer, nullable=False, default=0),
    CheckConstraint("stock >= 0", name="ck_product_sizes_stock"),
)


def setup_tables(engine: Engine) -> None:
    """Create the stock schema."""
    metadata.create_all(engine)


def drop_tables(engine: Engine) -> None:
    """Drop the stock schema."""
    metadata.drop_all(engine)


def _counter_columns(counter: Counter) -> dict:
    if isinstance(counter, SizeKeyedCounter):
        return {"size_keyed": True, "stock": None, "legacy_sizes": None}
    return {
        "size_keyed": False,
        "stock": counter.stock,
        "legacy_sizes": ", ".join(counter.legacy_sizes) or None,
    }


def _size_rows(product_id: str, color: str, counter: Counter) -> list[dict]:
    if not isinstance(counter, SizeKeyedCounter):
        return []
    return [
        {"product_id": product_id, "color": color, "name": s.name, "position": position, "stock": s.stock}
        for position, s in enumerate(counter.sizes)
    ]


class SQLStockStore(StockStore):
    """Stock store over any SQLAlchemy-supported database."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_url(cls, url: str, **engine_options) -> "SQLStockStore":
        return cls(create_engine(url, **engine_options))

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def fetch_product(self, product_id: str) -> Product | None:
        with self.engine.connect() as conn:
            row = conn.execute(select(products).where(products.c.id == str(product_id))).mappings().first()
            if row is None:
                return None
            color_rows = (
                conn.execute(
                    select(product_colors)
                    .where(product_colors.c.product_id == row["id"])
                    .order_by(product_colors.c.position)
                )
                .mappings()
                .all()
            )
            size_rows = (
                conn.execute(
                    select(product_sizes)
                    .where(product_sizes.c.product_id == row["id"])
                    .order_by(product_sizes.c.position)
                )
                .mappings()
                .all()
            )

        sizes_by_color: dict[str, list[SizeStock]] = {}
        for size_row in size_rows:
            sizes_by_color.setdefault(size_row["color"], []).append(
                SizeStock(name=size_row["name"], stock=size_row["stock"])
            )

        def counter_for(holder, color: str) -> Counter:
            if holder["size_keyed"]:
                return SizeKeyedCounter(sizes=tuple(sizes_by_color.get(color, [])))
            return FlatCounter(stock=holder["stock"] or 0, legacy_sizes=parse_legacy_sizes(holder["legacy_sizes"]))

        return Product(
            id=row["id"],
            name=row["name"],
            price=row["price"],
            has_colors=bool(row["has_colors"]),
            counter=counter_for(row, PRODUCT_LEVEL),
            colors=tuple(Color(name=c["name"], counter=counter_for(c, c["name"])) for c in color_rows),
            image_url=row["image_url"],
        )

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def save_product(self, product: Product) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(product_sizes).where(product_sizes.c.product_id == product.id))
            conn.execute(delete(product_colors).where(product_colors.c.product_id == product.id))
            conn.execute(delete(products).where(products.c.id == product.id))

            conn.execute(
                insert(products).values(
                    id=product.id,
                    name=product.name,
                    price=product.price,
                    image_url=product.image_url,
                    has_colors=product.has_colors,
                    **_counter_columns(product.counter),
                )
            )
            size_rows = _size_rows(product.id, PRODUCT_LEVEL, product.counter)
            for position, color in enumerate(product.colors):
                conn.execute(
                    insert(product_colors).values(
                        product_id=product.id,
                        name=color.name,
                        position=position,
                        **_counter_columns(color.counter),
                    )
                )
                size_rows.extend(_size_rows(product.id, color.name, color.counter))
            if size_rows:
                conn.execute(insert(product_sizes), size_rows)

    def adjust(self, key: StockKey, delta: int) -> bool:
        if key.size is not None:
            table = product_sizes
            clause = and_(
                table.c.product_id == str(key.product_id),
                table.c.color == (key.color or PRODUCT_LEVEL),
                table.c.name == key.size,
            )
        elif key.color is not None:
            table = product_colors
            clause = and_(
                table.c.product_id == str(key.product_id),
                table.c.name == key.color,
                table.c.size_keyed == false(),
            )
        else:
            table = products
            clause = and_(table.c.id == str(key.product_id), table.c.size_keyed == false())

        statement = update(table).where(clause).values(stock=table.c.stock + delta)
        if delta < 0:
            statement = statement.where(table.c.stock >= -delta)

        with self.engine.begin() as conn:
            result = conn.execute(statement)

        logger.debug("Stock counter adjusted", key=key.describe(), delta=delta, rows=result.rowcount)
        return result.rowcount == 1
