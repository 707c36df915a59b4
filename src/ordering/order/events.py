"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer order was validated against stock and recorded."""

    order_id = Identifier(required=True)
    customer_name = String(required=True)
    total = Float(required=True)
    item_count = Integer(required=True)
    line_items = Text(required=True)  # JSON: list of line snapshots
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """An admin moved the order to a different status."""

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
