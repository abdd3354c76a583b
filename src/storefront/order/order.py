"""Order aggregate (Event Sourced).

An Order is written once, atomically, from a validated cart and never
deleted. Its items, address and total are frozen at placement; only
``status`` and ``payment_status`` move afterwards, and only through the
transitions in ``storefront.order.status``.

Every public mutator follows the same shape: ask the state machine whether
the move is allowed, return quietly if the order is already in the target
status, otherwise raise the event. The ``@apply`` handlers are the only code
that writes state, so live changes and replay cannot drift apart.
"""

import json
import random
import time
from datetime import UTC, datetime
from uuid import uuid4

from protean import apply
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import ForbiddenError
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
from storefront.order.status import (
    Actor,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    assert_transition,
    initial_status_for,
)

CURRENCY = "INR"
ADDRESS_FIELDS = ("name", "phone", "street", "city", "state", "postal_code", "country")


def generate_order_number() -> str:
    """Human-readable order number, e.g. ``ORD-1718000000000-42``."""
    return f"ORD-{int(time.time() * 1000)}-{random.randint(0, 9999)}"


def order_total(items_data) -> float:
    return round(sum(float(item["unit_price"]) * int(item["quantity"]) for item in items_data), 2)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where this order ships. Captured at checkout and never edited afterwards."""

    name = String(required=True, max_length=255)
    phone = String(required=True, max_length=20)
    street = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100, default="India")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line. Name, image and price are a snapshot of the catalogue
    at purchase time and stay authoritative for display even if the product
    changes later."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    image = String(max_length=1000)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    line_total = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@storefront.aggregate(is_event_sourced=True)
class Order:
    order_number = String(max_length=50)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    total = Float(default=0.0)
    currency = String(max_length=3, default=CURRENCY)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        items_data,
        shipping_address,
        payment_method,
        customer_name=None,
        customer_email=None,
        order_number=None,
    ):
        """Record a new order.

        Args:
            customer_id: The signed-in buyer placing the order.
            items_data: List of dicts with product_id, name, image,
                        unit_price, quantity. One dict per product.
            shipping_address: Dict with name, phone, street, city, state,
                              postal_code, country.
            payment_method: "COD" or "UPI"; decides the initial status.
        """
        method = PaymentMethod(payment_method)
        status = initial_status_for(method)

        items_with_ids = [
            {
                "id": str(uuid4()),
                "product_id": str(item["product_id"]),
                "name": item["name"],
                "image": item.get("image"),
                "unit_price": float(item["unit_price"]),
                "quantity": int(item["quantity"]),
                "line_total": round(float(item["unit_price"]) * int(item["quantity"]), 2),
            }
            for item in items_data
        ]

        address = ShippingAddress(
            **{k: v for k, v in dict(shipping_address).items() if k in ADDRESS_FIELDS and v is not None}
        )

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number or generate_order_number(),
                customer_id=str(customer_id),
                customer_name=customer_name,
                customer_email=customer_email,
                items=json.dumps(items_with_ids),
                shipping_address=json.dumps(address.to_dict()),
                total=order_total(items_with_ids),
                currency=CURRENCY,
                status=status.value,
                payment_method=method.value,
                payment_status=PaymentStatus.PENDING.value,
                placed_at=datetime.now(UTC),
            )
        )
        return order

    # -------------------------------------------------------------------
    # State machine guard
    # -------------------------------------------------------------------
    def _should_transition(self, target, actor) -> bool:
        """False when the order already sits in ``target``; raises when the move is illegal."""
        if OrderStatus(self.status) == target:
            return False
        assert_transition(self.status, target, actor)
        return True

    def change_status(self, new_status, actor=Actor.ADMIN, reason=None, actor_id=None) -> bool:
        """Drive the order to ``new_status`` on behalf of ``actor``.

        A buyer asking for PAID is their payment self-report, checked against
        ``actor_id``. Returns True if an event was raised, False for a no-op
        re-application.
        """
        target = OrderStatus(new_status)
        if target == OrderStatus.PAID and Actor(actor) is Actor.BUYER:
            return self.report_payment(actor_id)

        action = {
            OrderStatus.CONFIRMED: self.confirm,
            OrderStatus.PROCESSING: self.mark_processing,
            OrderStatus.SHIPPED: self.ship,
            OrderStatus.DELIVERED: self.deliver,
            OrderStatus.CANCELLED: lambda a: self.cancel(a, reason=reason),
            OrderStatus.REFUNDED: self.refund,
        }.get(target)

        if action is None:
            # PENDING and PAYMENT_PENDING_CONFIRMATION are entry states; PAID
            # here is an admin request, which the state machine refuses
            self._should_transition(target, actor)
            return False
        return action(Actor(actor))

    # -------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------
    def report_payment(self, customer_id) -> bool:
        """Buyer's "I've paid" for a UPI order. Trusted as-is; reconciled by hand."""
        if not self.is_owned_by(customer_id):
            raise ForbiddenError("Only the buyer who placed this order can report its payment")
        if not self._should_transition(OrderStatus.PAID, Actor.BUYER):
            return False

        self.raise_(
            PaymentReported(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                amount=self.total,
                reported_at=datetime.now(UTC),
            )
        )
        return True

    # -------------------------------------------------------------------
    # Admin transitions
    # -------------------------------------------------------------------
    def confirm(self, actor=Actor.ADMIN) -> bool:
        if not self._should_transition(OrderStatus.CONFIRMED, actor):
            return False
        self.raise_(OrderConfirmed(order_id=str(self.id), confirmed_at=datetime.now(UTC)))
        return True

    def mark_processing(self, actor=Actor.ADMIN) -> bool:
        if not self._should_transition(OrderStatus.PROCESSING, actor):
            return False
        self.raise_(OrderProcessing(order_id=str(self.id), started_at=datetime.now(UTC)))
        return True

    def ship(self, actor=Actor.ADMIN) -> bool:
        if not self._should_transition(OrderStatus.SHIPPED, actor):
            return False
        self.raise_(OrderShipped(order_id=str(self.id), shipped_at=datetime.now(UTC)))
        return True

    def deliver(self, actor=Actor.ADMIN) -> bool:
        if not self._should_transition(OrderStatus.DELIVERED, actor):
            return False
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=datetime.now(UTC)))
        return True

    def cancel(self, actor=Actor.ADMIN, reason=None) -> bool:
        if not self._should_transition(OrderStatus.CANCELLED, actor):
            return False
        released = [{"product_id": str(item.product_id), "quantity": item.quantity} for item in self.items]
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                items=json.dumps(released),
                reason=reason,
                cancelled_at=datetime.now(UTC),
            )
        )
        return True

    def refund(self, actor=Actor.ADMIN) -> bool:
        if not self._should_transition(OrderStatus.REFUNDED, actor):
            return False
        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                refund_amount=self.total,
                refunded_at=datetime.now(UTC),
            )
        )
        return True

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    def is_owned_by(self, customer_id) -> bool:
        return customer_id is not None and str(customer_id) == str(self.customer_id)

    # -------------------------------------------------------------------
    # @apply methods — rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.order_number = event.order_number
        self.customer_id = event.customer_id
        self.customer_name = event.customer_name
        self.customer_email = event.customer_email
        self.total = event.total
        self.currency = event.currency or CURRENCY
        self.status = event.status
        self.payment_method = event.payment_method
        self.payment_status = event.payment_status
        self.created_at = event.placed_at
        self.updated_at = event.placed_at

        items_data = json.loads(event.items) if isinstance(event.items, str) else []
        self.items = [OrderItem(**{k: v for k, v in item.items() if v is not None}) for item in items_data]

        address = json.loads(event.shipping_address) if isinstance(event.shipping_address, str) else {}
        if address:
            self.shipping_address = ShippingAddress(**address)

    @apply
    def _on_payment_reported(self, event: PaymentReported):
        self.status = OrderStatus.PAID.value
        self.payment_status = PaymentStatus.PAID.value
        self.updated_at = event.reported_at

    @apply
    def _on_order_confirmed(self, event: OrderConfirmed):
        self.status = OrderStatus.CONFIRMED.value
        self.updated_at = event.confirmed_at

    @apply
    def _on_order_processing(self, event: OrderProcessing):
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = event.started_at

    @apply
    def _on_order_shipped(self, event: OrderShipped):
        self.status = OrderStatus.SHIPPED.value
        self.updated_at = event.shipped_at

    @apply
    def _on_order_delivered(self, event: OrderDelivered):
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = event.delivered_at

    @apply
    def _on_order_cancelled(self, event: OrderCancelled):
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = event.reason
        self.updated_at = event.cancelled_at

    @apply
    def _on_order_refunded(self, event: OrderRefunded):
        self.status = OrderStatus.REFUNDED.value
        self.payment_status = PaymentStatus.REFUNDED.value
        self.updated_at = event.refunded_at
