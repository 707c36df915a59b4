"""Order status changes — command, handler and stock side effects.

Any status may move to any other. The stock consequences depend only on the
transition:

    * → Annulée          restore every line's quantity
    Annulée → *          take every line's quantity again
    * → Expédiée         email the customer (when an email is on file)

Side effects run after the status is persisted and never block it. A line
that cannot be re-deducted when an order leaves Annulée is logged with
``uncancel_without_stock`` so an operator can reconcile it.
"""

from collections.abc import Callable

import structlog
from catalogue.variants import key_for_line
from inventory import protocol
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from shared.errors import OrderNotFound
from shared.logging import log_context

from ordering.domain import ordering
from ordering.notifier import best_effort, run_now
from ordering.order.order import Order, OrderStatus, StatusTransition

logger = structlog.get_logger(__name__)

# Status filter values meaning "every status" in the admin listing.
ALL_STATUSES = ("tous", "all")


@ordering.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, choices=OrderStatus)


@ordering.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        transition = order.change_status(command.new_status)
        repo.add(order)
        return {
            "order": order.snapshot(),
            "previous_status": transition.previous.value,
            "new_status": transition.new.value,
        }


def _restore_stock(order: dict) -> None:
    for line in order["lines"]:
        key = key_for_line(line["product_id"], line["color"], line["size"], line["size_specific"])
        try:
            protocol.increment(key, line["quantity"])
        except Exception:
            logger.exception("Stock restore failed", key=key.describe(), quantity=line["quantity"])


def _retake_stock(order: dict) -> None:
    for line in order["lines"]:
        key = key_for_line(line["product_id"], line["color"], line["size"], line["size_specific"])
        try:
            applied = protocol.decrement(key, line["quantity"])
        except Exception:
            logger.exception(
                "Stock re-deduction failed",
                key=key.describe(),
                quantity=line["quantity"],
                uncancel_without_stock=True,
            )
            continue
        if not applied:
            logger.warning(
                "Order reinstated without stock",
                key=key.describe(),
                quantity=line["quantity"],
                uncancel_without_stock=True,
            )


def _stock_lines(order_id: str) -> dict:
    order = current_domain.repository_for(Order).get(order_id)
    return {
        "id": str(order.id),
        "lines": [
            {
                "product_id": str(item.product_id),
                "color": item.color,
                "size": item.size,
                "size_specific": bool(item.size_specific),
                "quantity": item.quantity,
            }
            for item in order.line_items
        ],
    }


def update_order_status(order_id: str, new_status: str, schedule: Callable = run_now) -> dict:
    """Change an order's status and apply the transition's side effects.

    Returns the order snapshot after the change. ``schedule`` receives the
    fire-and-forget notifications.
    """
    with log_context(order_id=order_id):
        try:
            result = current_domain.process(
                ChangeOrderStatus(order_id=order_id, new_status=new_status),
                asynchronous=False,
            )
        except ObjectNotFoundError:
            raise OrderNotFound(order_id) from None

        snapshot = result["order"]
        transition = StatusTransition(
            previous=OrderStatus(result["previous_status"]),
            new=OrderStatus(result["new_status"]),
        )
        if not transition.changed:
            return snapshot

        logger.info(
            "Order status changed",
            previous_status=transition.previous.value,
            new_status=transition.new.value,
        )

        if transition.cancels or transition.reinstates:
            lines = _stock_lines(order_id)
            if transition.cancels:
                _restore_stock(lines)
            else:
                _retake_stock(lines)
            product_ids = sorted({line["product_id"] for line in lines["lines"]})
            schedule(best_effort, "products_changed", product_ids)

        if transition.ships and snapshot.get("email"):
            schedule(
                best_effort,
                "order_status_changed",
                snapshot,
                transition.previous.value,
                transition.new.value,
            )

        return snapshot


def get_order(order_id: str) -> dict:
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(order_id) from None
    return order.snapshot()


def list_orders(status: str | None = None, limit: int = 50, offset: int = 0) -> tuple[list[dict], int]:
    """Newest orders first, one page at a time.

    Returns the page of snapshots and the number of orders matching
    ``status`` across all pages. ``None`` or one of ``ALL_STATUSES`` lists
    every order.
    """
    query = current_domain.repository_for(Order)._dao.query
    if status and status not in ALL_STATUSES:
        query = query.filter(status=status)

    results = query.order_by("-created_at").offset(offset).limit(limit).all()
    return [order.snapshot() for order in results.items], results.total
