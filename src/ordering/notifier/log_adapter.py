"""Default notifier that records outbound notifications in the log.

Deployments wire a real delivery adapter with ``set_notifier``; until then
the log is the audit trail of what would have been sent.
"""

import structlog

from ordering.notifier.port import Notifier

logger = structlog.get_logger(__name__)


class LoggingNotifier(Notifier):
    def order_placed(self, order: dict) -> None:
        logger.info(
            "Order placed notification",
            order_id=order.get("id"),
            total=order.get("total"),
            has_email=bool(order.get("email")),
        )

    def order_status_changed(self, order: dict, previous_status: str, new_status: str) -> None:
        logger.info(
            "Order status email",
            order_id=order.get("id"),
            previous_status=previous_status,
            new_status=new_status,
        )

    def products_changed(self, product_ids: list[str]) -> None:
        logger.info("Products cache invalidated", product_ids=product_ids)
