"""Order fan-out — publishes order events on the ``orders`` channel and emails the buyer.

Runs after the order change has been committed. Publishing and email are
best effort: a failing transport is logged and the order stays as it is.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.fanout import ORDERS_CHANNEL, get_publisher
from storefront.mail import get_mailer
from storefront.mail.templates import render
from storefront.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderPlaced,
    OrderProcessing,
    OrderRefunded,
    OrderShipped,
    PaymentReported,
)
from storefront.order.order import Order
from storefront.order.status import OrderStatus

logger = structlog.get_logger(__name__)

NEW_ORDER_EVENT = "new-order"
STATUS_UPDATED_EVENT = "order-status-updated"

STATUS_EVENTS = {
    OrderStatus.PAID: "order-paid",
    OrderStatus.CONFIRMED: "order-confirmed",
    OrderStatus.PROCESSING: "order-processing",
    OrderStatus.SHIPPED: "order-shipping",
    OrderStatus.DELIVERED: "order-shipping",
    OrderStatus.CANCELLED: "order-cancelled",
    OrderStatus.REFUNDED: "order-refunded",
}


def _iso(value):
    return value.isoformat() if value is not None else None


def order_payload(order) -> dict:
    return {
        "orderId": str(order.id),
        "orderNumber": order.order_number,
        "status": order.status,
        "paymentMethod": order.payment_method,
        "paymentStatus": order.payment_status,
        "total": order.total,
        "currency": order.currency,
        "user": {
            "id": str(order.customer_id),
            "name": order.customer_name,
            "email": order.customer_email,
        },
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
    }


def placed_payload(event: OrderPlaced) -> dict:
    return {
        "orderId": str(event.order_id),
        "orderNumber": event.order_number,
        "status": event.status,
        "paymentMethod": event.payment_method,
        "paymentStatus": event.payment_status,
        "total": event.total,
        "currency": event.currency,
        "user": {
            "id": str(event.customer_id),
            "name": event.customer_name,
            "email": event.customer_email,
        },
        "createdAt": _iso(event.placed_at),
        "updatedAt": _iso(event.placed_at),
    }


def _publish(event_name: str, payload: dict) -> None:
    try:
        get_publisher().publish(ORDERS_CHANNEL, event_name, payload)
    except Exception as e:
        logger.error(
            "Failed to publish order event",
            channel=ORDERS_CHANNEL,
            event_name=event_name,
            order_id=payload.get("orderId"),
            error=str(e),
        )


def _email(payload: dict) -> None:
    to = (payload.get("user") or {}).get("email")
    if not to:
        return

    rendered = render(payload)
    if rendered is None:
        return
    subject, body = rendered

    try:
        result = get_mailer().send(to=to, subject=subject, body=body)
    except Exception as e:
        logger.error("Order email failed", order_id=payload.get("orderId"), error=str(e))
        return

    if result.get("status") != "sent":
        logger.warning(
            "Order email not sent",
            order_id=payload.get("orderId"),
            error=result.get("error"),
        )


@storefront.event_handler(part_of=Order)
class OrderFanoutHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        payload = placed_payload(event)
        _publish(NEW_ORDER_EVENT, payload)
        _email(payload)

    def _announce(self, order_id, status: OrderStatus, occurred_at) -> None:
        # The order may have moved on by the time an async worker gets here;
        # the payload reports the status and time of this event.
        order = current_domain.repository_for(Order).get(order_id)
        payload = {**order_payload(order), "status": status.value, "updatedAt": _iso(occurred_at)}

        _publish(STATUS_UPDATED_EVENT, payload)
        status_event = STATUS_EVENTS.get(status)
        if status_event:
            _publish(status_event, payload)
        _email(payload)

    @handle(PaymentReported)
    def on_payment_reported(self, event: PaymentReported) -> None:
        self._announce(event.order_id, OrderStatus.PAID, event.reported_at)

    @handle(OrderConfirmed)
    def on_order_confirmed(self, event: OrderConfirmed) -> None:
        self._announce(event.order_id, OrderStatus.CONFIRMED, event.confirmed_at)

    @handle(OrderProcessing)
    def on_order_processing(self, event: OrderProcessing) -> None:
        self._announce(event.order_id, OrderStatus.PROCESSING, event.started_at)

    @handle(OrderShipped)
    def on_order_shipped(self, event: OrderShipped) -> None:
        self._announce(event.order_id, OrderStatus.SHIPPED, event.shipped_at)

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        self._announce(event.order_id, OrderStatus.DELIVERED, event.delivered_at)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        self._announce(event.order_id, OrderStatus.CANCELLED, event.cancelled_at)

    @handle(OrderRefunded)
    def on_order_refunded(self, event: OrderRefunded) -> None:
        self._announce(event.order_id, OrderStatus.REFUNDED, event.refunded_at)
