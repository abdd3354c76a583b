"""Admin order feed — the reference subscriber for the ``orders`` channel.

Keeps the latest known state of each order, keyed by order id. Every
message carries the full status, so a message is applied by overwriting the
cached entry; replays and duplicates land on the same value. A message
stamped earlier than the cached one is ignored, which keeps a late,
out-of-order delivery from rolling the status back.
"""

from datetime import datetime

import structlog

from storefront.fanout.port import ChannelMessage

logger = structlog.get_logger(__name__)

NEW_ORDER = "new-order"


def _stamp(payload):
    value = payload.get("updatedAt") or payload.get("createdAt")
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


class AdminOrderFeed:
    def __init__(self):
        self.orders: dict[str, dict] = {}
        self.alerts: list[str] = []

    def __call__(self, message: ChannelMessage) -> None:
        self.receive(message)

    def receive(self, message: ChannelMessage) -> None:
        payload = message.payload
        order_id = payload.get("orderId")
        if not order_id:
            logger.warning("Order event without an order id", event_name=message.event)
            return

        cached = self.orders.get(order_id)
        if cached is not None:
            incoming, current = _stamp(payload), _stamp(cached)
            if incoming is not None and current is not None and incoming < current:
                return

        if message.event == NEW_ORDER and cached is None:
            self.alerts.append(order_id)

        self.orders[order_id] = {**(cached or {}), **payload}

    def status_of(self, order_id) -> str | None:
        entry = self.orders.get(str(order_id))
        return entry["status"] if entry else None

    def newest_first(self) -> list[dict]:
        return sorted(
            self.orders.values(),
            key=lambda entry: str(entry.get("createdAt") or ""),
            reverse=True,
        )
