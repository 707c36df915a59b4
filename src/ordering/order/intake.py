"""Order intake — authoritative checkout.

The client's cart is advisory. Intake re-reads every product from the stock
store, prices lines from the server record and refuses the whole order if any
counter lacks stock for the lines drawing on it (phase A). Only once the order
is persisted are the counters decremented, one conditional update per line
(phase B). A decrement that loses a race is logged and the order stands;
operators reconcile from the log.

    intake = OrderIntake()
    order = intake.place(payload, client_id="203.0.113.7")
"""

import json
from collections import defaultdict
from collections.abc import Callable

import structlog
from catalogue.variants import ResolvedStock, resolve_stock
from inventory import protocol
from inventory.store import get_store
from protean.utils.globals import current_domain
from pydantic import ValidationError as PydanticValidationError
from shared.errors import DecrementRaceFailure, InsufficientStock, InvalidPayload, ProductNotFound, RateLimited
from shared.logging import log_context

from ordering.api.schemas import OrderLineRequest, PlaceOrderRequest
from ordering.notifier import best_effort, run_now
from ordering.order.order import Order
from ordering.order.placement import PlaceOrder
from ordering.ratelimit import get_limiter

logger = structlog.get_logger(__name__)


def _field_errors(exc: PydanticValidationError) -> list[dict]:
    return [
        {"champ": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]


def _variant_label(name: str, color: str | None, size: str | None) -> str:
    label = name
    if color:
        label += f" ({color})"
    if size:
        label += f" - Taille {size}"
    return label


def _insufficient(item: dict, available: int) -> InsufficientStock:
    label = _variant_label(item["name"], item["color"], item["size"])
    return InsufficientStock(f"Stock insuffisant pour {label}. Stock disponible: {available}", available=available)


class OrderIntake:
    """Validates, creates and then debits an order."""

    def __init__(self, rate_limit_prefix: str = "commandes") -> None:
        self.rate_limit_prefix = rate_limit_prefix

    def place(self, payload, client_id: str = "unknown", schedule: Callable = run_now) -> dict:
        """Create an order from a raw request body and return its snapshot.

        Raises:
            RateLimited: the client exceeded its submission budget.
            InvalidPayload: the body failed schema validation.
            ProductNotFound, VariantNotFound, InsufficientStock: a line cannot
                be served; nothing is persisted.
        """
        with log_context(client_id=client_id):
            self._admit(client_id)
            request = self._validate(payload)

            checked = [self._check_line(line) for line in request.produits]
            self._check_shared_counters(checked)
            line_items = [item for item, _ in checked]

            order_id = current_domain.process(
                PlaceOrder(
                    customer_name=request.nom_client,
                    phone=request.telephone,
                    email=request.email or None,
                    address=request.adresse,
                    city=request.ville,
                    line_items=json.dumps(line_items),
                ),
                asynchronous=False,
            )
            snapshot = current_domain.repository_for(Order).get(order_id).snapshot()

            with log_context(order_id=order_id):
                logger.info("Order created", total=snapshot["total"], item_count=len(line_items))
                self._decrement(order_id, checked)

            product_ids = sorted({item["product_id"] for item in line_items})
            schedule(best_effort, "products_changed", product_ids)
            schedule(best_effort, "order_placed", snapshot)
            return snapshot

    # -------------------------------------------------------------------
    # Phase A
    # -------------------------------------------------------------------
    def _admit(self, client_id: str) -> None:
        decision = get_limiter().hit(f"{self.rate_limit_prefix}:{client_id}")
        if not decision.allowed:
            logger.warning("Order submission rate limited", retry_after=decision.retry_after)
            raise RateLimited(decision.retry_after)

    def _validate(self, payload) -> PlaceOrderRequest:
        try:
            return PlaceOrderRequest.model_validate(payload)
        except PydanticValidationError as exc:
            raise InvalidPayload("Données invalides", details=_field_errors(exc)) from None

    def _check_line(self, line: OrderLineRequest) -> tuple[dict, ResolvedStock]:
        product_id = str(line.id)
        product = get_store().fetch_product(product_id)
        if product is None:
            raise ProductNotFound(product_id, name=line.nom)

        color = line.couleur or None
        size = line.taille or None
        resolved = resolve_stock(product, color=color, size=size)

        item = {
            "product_id": product.id,
            "name": product.name,
            "quantity": line.quantite,
            "unit_price": product.price,
            "color": color,
            "size": size,
            "image_url": line.image_url or product.image_url,
            "size_specific": resolved.size_specific,
        }
        if resolved.available < line.quantite:
            raise _insufficient(item, resolved.available)
        return item, resolved

    def _check_shared_counters(self, checked: list[tuple[dict, ResolvedStock]]) -> None:
        """Refuse the order when lines drawing on one counter jointly exceed it."""
        requested = defaultdict(int)
        for item, resolved in checked:
            requested[resolved.key] += item["quantity"]
            if requested[resolved.key] > resolved.available:
                raise _insufficient(item, resolved.available)

    # -------------------------------------------------------------------
    # Phase B
    # -------------------------------------------------------------------
    def _decrement(self, order_id: str, checked: list[tuple[dict, ResolvedStock]]) -> None:
        for item, resolved in checked:
            key = resolved.key
            try:
                applied = protocol.decrement(key, item["quantity"])
            except Exception:
                logger.exception(
                    "Stock decrement errored after order creation",
                    counter=key.describe(),
                    quantity=item["quantity"],
                )
                continue

            if not applied:
                failure = DecrementRaceFailure(order_id, key.describe(), item["quantity"])
                logger.error(
                    "Stock decrement lost a race after order creation",
                    counter=failure.counter,
                    quantity=failure.quantity,
                    error=failure.message,
                )
