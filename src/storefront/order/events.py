"""Domain events for the Order aggregate.

Events are the source of truth for an Order: the aggregate is rebuilt by
replaying them, projections read them, and the fan-out handler turns them
into channel messages for the admin console.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out and recorded as an order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    customer_email = String()
    items = Text(required=True)  # JSON: list of item dicts
    shipping_address = Text(required=True)  # JSON: address dict
    total = Float(required=True)
    currency = String(default="INR")
    status = String(required=True)
    payment_method = String(required=True)
    payment_status = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentReported:
    """The buyer says the UPI transfer went through. Not independently verified."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    reported_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    confirmed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderProcessing:
    __version__ = 1

    order_id = Identifier(required=True)
    started_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """Cancelled before fulfillment; reserved stock goes back on the shelf."""

    __version__ = 1

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{product_id, quantity}]
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderRefunded:
    __version__ = 1

    order_id = Identifier(required=True)
    refund_amount = Float(required=True)
    refunded_at = DateTime(required=True)
