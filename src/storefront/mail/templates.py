"""Plain-text templates for order emails.

Each template takes the order payload published on the ``orders`` channel
and returns ``(subject, body)``.
"""

from storefront.order.status import OrderStatus


def _greeting(payload):
    name = (payload.get("user") or {}).get("name")
    return f"Hi {name}," if name else "Hi,"


def _amount(payload):
    return f"{payload.get('currency', 'INR')} {float(payload.get('total') or 0):.2f}"


def order_confirmation(payload):
    subject = f"Your order {payload['orderNumber']} is confirmed"
    body = (
        f"{_greeting(payload)}\n\n"
        f"Thanks for shopping with us. Order {payload['orderNumber']} for "
        f"{_amount(payload)} is now {payload['status'].replace('_', ' ').lower()}.\n"
    )
    return subject, body


def payment_received(payload):
    subject = f"We received your payment notice for {payload['orderNumber']}"
    body = (
        f"{_greeting(payload)}\n\n"
        f"You told us you paid {_amount(payload)} by UPI. "
        "We'll match it with our bank statement and start packing your order.\n"
    )
    return subject, body


def shipping_update(payload):
    if payload["status"] == OrderStatus.DELIVERED.value:
        subject = f"Order {payload['orderNumber']} was delivered"
        line = "Your order has been delivered. Enjoy!"
    else:
        subject = f"Order {payload['orderNumber']} is on its way"
        line = "Your order has shipped and is on its way to you."
    return subject, f"{_greeting(payload)}\n\n{line}\n"


def cancellation_notice(payload):
    subject = f"Order {payload['orderNumber']} was cancelled"
    body = f"{_greeting(payload)}\n\nYour order {payload['orderNumber']} has been cancelled.\n"
    return subject, body


def refund_notice(payload):
    subject = f"Refund issued for {payload['orderNumber']}"
    body = f"{_greeting(payload)}\n\nWe have refunded {_amount(payload)} for order {payload['orderNumber']}.\n"
    return subject, body


# Status an order just entered -> template. PROCESSING sends nothing.
TEMPLATES_BY_STATUS = {
    OrderStatus.PENDING: order_confirmation,
    OrderStatus.PAYMENT_PENDING_CONFIRMATION: order_confirmation,
    OrderStatus.CONFIRMED: order_confirmation,
    OrderStatus.PAID: payment_received,
    OrderStatus.SHIPPED: shipping_update,
    OrderStatus.DELIVERED: shipping_update,
    OrderStatus.CANCELLED: cancellation_notice,
    OrderStatus.REFUNDED: refund_notice,
}


def render(payload):
    """Return ``(subject, body)`` for the order's current status, or None when no email goes out."""
    template = TEMPLATES_BY_STATUS.get(OrderStatus(payload["status"]))
    return template(payload) if template else None
