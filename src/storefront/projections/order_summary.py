"""Order summary — per-buyer order history view."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
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
from storefront.order.status import OrderStatus, PaymentStatus


@storefront.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, max_length=50)
    customer_id = Identifier(required=True)
    status = String(required=True)
    payment_method = String()
    payment_status = String()
    item_count = Integer(default=0)
    total = Float()
    currency = String(default="INR")
    created_at = DateTime()
    updated_at = DateTime()


@storefront.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                status=event.status,
                payment_method=event.payment_method,
                payment_status=event.payment_status,
                item_count=sum(int(item["quantity"]) for item in items),
                total=event.total,
                currency=event.currency or "INR",
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    def _update_status(self, order_id, status, updated_at=None, payment_status=None):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(order_id)
        summary.status = status.value
        if payment_status:
            summary.payment_status = payment_status.value
        if updated_at:
            summary.updated_at = updated_at
        repo.add(summary)

    @on(PaymentReported)
    def on_payment_reported(self, event):
        self._update_status(event.order_id, OrderStatus.PAID, event.reported_at, PaymentStatus.PAID)

    @on(OrderConfirmed)
    def on_order_confirmed(self, event):
        self._update_status(event.order_id, OrderStatus.CONFIRMED, event.confirmed_at)

    @on(OrderProcessing)
    def on_order_processing(self, event):
        self._update_status(event.order_id, OrderStatus.PROCESSING, event.started_at)

    @on(OrderShipped)
    def on_order_shipped(self, event):
        self._update_status(event.order_id, OrderStatus.SHIPPED, event.shipped_at)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        self._update_status(event.order_id, OrderStatus.DELIVERED, event.delivered_at)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update_status(event.order_id, OrderStatus.CANCELLED, event.cancelled_at)

    @on(OrderRefunded)
    def on_order_refunded(self, event):
        self._update_status(event.order_id, OrderStatus.REFUNDED, event.refunded_at, PaymentStatus.REFUNDED)
