"""Error taxonomy shared by the storefront bounded contexts.

Every error that can reach a caller carries the HTTP status it maps to and a
human-readable (French, customer-facing) message. ``details`` holds optional
structured context such as pydantic field errors.
"""

from typing import Any


class StorefrontError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload = {"success": False, "error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidPayload(StorefrontError):
    """Malformed or missing request fields."""


class ProductNotFound(StorefrontError):
    def __init__(self, product_id: str, name: str | None = None) -> None:
        super().__init__(f"Produit {name or product_id} introuvable")
        self.product_id = product_id


class VariantNotFound(StorefrontError):
    """The requested color/size combination does not exist on the product."""


class StockUnavailable(StorefrontError):
    """The resolved counter is empty."""


class InsufficientStock(StorefrontError):
    def __init__(self, message: str, available: int) -> None:
        super().__init__(message, details={"available": available})
        self.available = available


class RateLimited(StorefrontError):
    status_code = 429

    def __init__(self, retry_after: int) -> None:
        super().__init__("Trop de tentatives. Veuillez réessayer dans une minute.")
        self.retry_after = retry_after


class Unauthorized(StorefrontError):
    status_code = 401

    def __init__(self, message: str = "Non autorisé") -> None:
        super().__init__(message)


class OrderNotFound(StorefrontError):
    status_code = 404

    def __init__(self, order_id: str) -> None:
        super().__init__("Commande introuvable")
        self.order_id = order_id


class DecrementRaceFailure(StorefrontError):
    """A post-creation conditional decrement lost a race.

    Never raised to callers: the order is already committed. Instances are
    built only so the failure is logged with a consistent shape.
    """

    status_code = 409

    def __init__(self, order_id: str, counter: str, quantity: int) -> None:
        super().__init__(f"Stock insuffisant lors de la décrémentation de {counter} (quantité {quantity})")
        self.order_id = order_id
        self.counter = counter
        self.quantity = quantity
