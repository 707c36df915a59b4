"""Recording notifier for development and testing.

Keeps every call in ``calls`` and can be configured to fail, which is how
tests prove that notification errors never reach the order flow.
"""

from ordering.notifier.port import Notifier


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.should_fail: bool = False
        self.calls: list[dict] = []

    def configure(self, should_fail: bool) -> None:
        self.should_fail = should_fail

    def _record(self, call: dict) -> None:
        self.calls.append(call)
        if self.should_fail:
            raise ConnectionError(f"Notification delivery failed: {call['method']}")

    def order_placed(self, order: dict) -> None:
        self._record({"method": "order_placed", "order_id": order.get("id"), "order": order})

    def order_status_changed(self, order: dict, previous_status: str, new_status: str) -> None:
        self._record(
            {
                "method": "order_status_changed",
                "order_id": order.get("id"),
                "previous_status": previous_status,
                "new_status": new_status,
            }
        )

    def products_changed(self, product_ids: list[str]) -> None:
        self._record({"method": "products_changed", "product_ids": list(product_ids)})

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]
