"""Order aggregate (CQRS) — the record of a cash-on-delivery purchase.

An order is written once at intake with a frozen snapshot of what was bought
(server price, resolved color/size, image) and afterwards only its status
moves. No transition is forbidden; what matters are the stock side effects
attached to entering or leaving ``Annulée``, which the status handler derives
from the ``StatusTransition`` returned here.
"""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged

# Totals are sums of two-decimal prices; allow float noise only.
_TOTAL_TOLERANCE = 1e-6


class OrderStatus(Enum):
    PENDING = "En attente"
    SHIPPED = "Expédiée"
    DELIVERED = "Livrée"
    CANCELLED = "Annulée"


@dataclass(frozen=True)
class StatusTransition:
    previous: OrderStatus
    new: OrderStatus

    @property
    def changed(self) -> bool:
        return self.previous != self.new

    @property
    def cancels(self) -> bool:
        """Entering Annulée from any other status."""
        return self.new == OrderStatus.CANCELLED and self.previous != OrderStatus.CANCELLED

    @property
    def reinstates(self) -> bool:
        """Leaving Annulée for any other status."""
        return self.previous == OrderStatus.CANCELLED and self.new != OrderStatus.CANCELLED

    @property
    def ships(self) -> bool:
        return self.new == OrderStatus.SHIPPED and self.previous != OrderStatus.SHIPPED


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class LineItem:
    """A purchased product as it was at checkout time.

    ``size_specific`` records whether stock was taken from the per-size
    counter; legacy shared-size lines were debited on the color or product
    counter and must be restored there.
    """

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    color = String(max_length=100)
    size = String(max_length=50)
    image_url = String(max_length=500)
    size_specific = Boolean(default=False)

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price

    def snapshot(self) -> dict:
        return {
            "id": str(self.product_id),
            "nom": self.name,
            "prix": self.unit_price,
            "quantite": self.quantity,
            "couleur": self.color,
            "taille": self.size,
            "image_url": self.image_url,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=50)
    email = String(max_length=255)
    address = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    line_items = HasMany(LineItem)
    total = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_line_items(self):
        if not self.line_items:
            raise ValidationError({"line_items": ["An order needs at least one line item"]})

    @invariant.post
    def total_must_match_line_items(self):
        expected = sum(item.subtotal for item in self.line_items)
        if abs((self.total or 0.0) - expected) > _TOTAL_TOLERANCE:
            raise ValidationError({"total": [f"Total {self.total} does not match line items ({expected})"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_name, phone, address, city, line_items, email=None):
        """Record a new order.

        Args:
            line_items: List of dicts with product_id, name, quantity,
                unit_price (server price), color, size, image_url and
                size_specific.
        """
        if not line_items:
            raise ValidationError({"line_items": ["An order needs at least one line item"]})

        now = datetime.now(UTC)
        items = [
            LineItem(
                product_id=item["product_id"],
                name=item["name"],
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                color=item.get("color"),
                size=item.get("size"),
                image_url=item.get("image_url"),
                size_specific=item.get("size_specific", False),
            )
            for item in line_items
        ]
        order = cls(
            customer_name=customer_name,
            phone=phone,
            email=email or None,
            address=address,
            city=city,
            line_items=items,
            total=sum(item.subtotal for item in items),
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_name=customer_name,
                total=order.total,
                item_count=len(items),
                line_items=json.dumps([item.snapshot() for item in items]),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def change_status(self, new_status) -> StatusTransition:
        """Move the order to ``new_status`` and describe the transition.

        Setting the current status again is a no-op and raises no event.
        """
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from None

        transition = StatusTransition(previous=OrderStatus(self.status), new=target)
        if not transition.changed:
            return transition

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=transition.previous.value,
                new_status=target.value,
                changed_at=now,
            )
        )
        return transition

    def snapshot(self) -> dict:
        """Wire representation used by the storefront and the admin console."""
        return {
            "id": str(self.id),
            "nom_client": self.customer_name,
            "telephone": self.phone,
            "email": self.email,
            "adresse": self.address,
            "ville": self.city,
            "produits": [item.snapshot() for item in self.line_items],
            "total": self.total,
            "statut": self.status,
            "date_commande": self.created_at.isoformat() if self.created_at else None,
        }
