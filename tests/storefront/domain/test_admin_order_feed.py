"""Tests for the admin order feed subscriber."""

from storefront.fanout.feed import AdminOrderFeed
from storefront.fanout.memory import InMemoryBus
from storefront.fanout.port import ChannelMessage


def _message(event, status, updated_at, order_id="ord-1"):
    return ChannelMessage(
        channel="orders",
        event=event,
        payload={
            "orderId": order_id,
            "orderNumber": "ORD-1-1",
            "status": status,
            "createdAt": "2026-01-10T10:00:00+00:00",
            "updatedAt": updated_at,
        },
    )


class TestAdminOrderFeed:
    def test_new_order_is_cached_and_alerted(self):
        feed = AdminOrderFeed()
        feed.receive(_message("new-order", "PENDING", "2026-01-10T10:00:00+00:00"))
        assert feed.status_of("ord-1") == "PENDING"
        assert feed.alerts == ["ord-1"]

    def test_status_update_overwrites(self):
        feed = AdminOrderFeed()
        feed.receive(_message("new-order", "PENDING", "2026-01-10T10:00:00+00:00"))
        feed.receive(_message("order-status-updated", "CONFIRMED", "2026-01-10T11:00:00+00:00"))
        assert feed.status_of("ord-1") == "CONFIRMED"

    def test_duplicates_are_harmless(self):
        feed = AdminOrderFeed()
        message = _message("new-order", "PENDING", "2026-01-10T10:00:00+00:00")
        feed.receive(message)
        feed.receive(message)
        assert len(feed.orders) == 1
        assert feed.alerts == ["ord-1"]

    def test_late_delivery_does_not_roll_back(self):
        feed = AdminOrderFeed()
        feed.receive(_message("order-status-updated", "SHIPPED", "2026-01-10T12:00:00+00:00"))
        feed.receive(_message("order-status-updated", "PROCESSING", "2026-01-10T11:00:00+00:00"))
        assert feed.status_of("ord-1") == "SHIPPED"

    def test_message_without_order_id_is_ignored(self):
        feed = AdminOrderFeed()
        feed.receive(ChannelMessage(channel="orders", event="new-order", payload={}))
        assert feed.orders == {}

    def test_subscribes_to_bus(self):
        bus = InMemoryBus()
        feed = AdminOrderFeed()
        bus.subscribe("orders", feed)
        bus.publish("orders", "new-order", _message("new-order", "PENDING", None).payload)
        assert feed.status_of("ord-1") == "PENDING"

    def test_newest_first(self):
        feed = AdminOrderFeed()
        older = _message("new-order", "PENDING", None, order_id="ord-old")
        newer = ChannelMessage(
            channel="orders",
            event="new-order",
            payload={"orderId": "ord-new", "status": "PENDING", "createdAt": "2026-02-01T00:00:00+00:00"},
        )
        feed.receive(older)
        feed.receive(newer)
        assert [o["orderId"] for o in feed.newest_first()] == ["ord-new", "ord-old"]
