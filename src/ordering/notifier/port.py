"""Notifier port (abstract interface).

Email, push and storefront cache revalidation are delivered by services
outside this subsystem. Every call is best-effort: callers schedule it
fire-and-forget and a failure never affects the order that triggered it.
"""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Abstract outbound notification interface."""

    @abstractmethod
    def order_placed(self, order: dict) -> None:
        """Announce a new order (admin push + customer/admin emails)."""
        ...

    @abstractmethod
    def order_status_changed(self, order: dict, previous_status: str, new_status: str) -> None:
        """Email the customer about a status change."""
        ...

    @abstractmethod
    def products_changed(self, product_ids: list[str]) -> None:
        """Invalidate cached storefront pages for these products."""
        ...
