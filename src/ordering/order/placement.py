"""Order placement — command and handler."""

import json

from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=50)
    email = String(max_length=255)
    address = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    line_items = Text(required=True)  # JSON: list of stock-checked line dicts


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        line_items = json.loads(command.line_items) if isinstance(command.line_items, str) else command.line_items

        order = Order.place(
            customer_name=command.customer_name,
            phone=command.phone,
            email=command.email,
            address=command.address,
            city=command.city,
            line_items=line_items,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
