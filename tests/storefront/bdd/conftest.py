"""Shared BDD fixtures and step definitions for storefront orders."""

import json
from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError
from protean.testing import given as given_
from pytest_bdd import given, parsers, then
from storefront.errors import IllegalTransitionError, TransitionNotPermittedError
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

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "PaymentReported": PaymentReported,
    "OrderConfirmed": OrderConfirmed,
    "OrderProcessing": OrderProcessing,
    "OrderShipped": OrderShipped,
    "OrderDelivered": OrderDelivered,
    "OrderCancelled": OrderCancelled,
    "OrderRefunded": OrderRefunded,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_id():
    return "ord-001"


@pytest.fixture()
def customer_id():
    return "buyer-001"


# ---------------------------------------------------------------------------
# Event fixtures (past tense — what happened)
# ---------------------------------------------------------------------------
def _placed(order_id, customer_id, status, payment_method):
    return OrderPlaced(
        order_id=order_id,
        order_number="ORD-1718000000000-42",
        customer_id=customer_id,
        customer_name="Asha Rao",
        customer_email="asha@example.com",
        items=json.dumps(
            [
                {
                    "id": "item-1",
                    "product_id": "argan-oil",
                    "name": "Argan Oil",
                    "unit_price": 250.0,
                    "quantity": 2,
                    "line_total": 500.0,
                }
            ]
        ),
        shipping_address=json.dumps(
            {
                "name": "Asha Rao",
                "phone": "9876543210",
                "street": "12 MG Road",
                "city": "Bengaluru",
                "state": "Karnataka",
                "postal_code": "560001",
                "country": "India",
            }
        ),
        total=500.0,
        currency="INR",
        status=status,
        payment_method=payment_method,
        payment_status="PENDING",
        placed_at=datetime.now(UTC),
    )


@pytest.fixture()
def cod_order_placed(order_id, customer_id):
    return _placed(order_id, customer_id, "PENDING", "COD")


@pytest.fixture()
def upi_order_placed(order_id, customer_id):
    return _placed(order_id, customer_id, "PAYMENT_PENDING_CONFIRMATION", "UPI")


@pytest.fixture()
def payment_reported(order_id, customer_id):
    return PaymentReported(order_id=order_id, customer_id=customer_id, amount=500.0, reported_at=datetime.now(UTC))


@pytest.fixture()
def order_confirmed(order_id):
    return OrderConfirmed(order_id=order_id, confirmed_at=datetime.now(UTC))


@pytest.fixture()
def order_processing(order_id):
    return OrderProcessing(order_id=order_id, started_at=datetime.now(UTC))


@pytest.fixture()
def order_shipped(order_id):
    return OrderShipped(order_id=order_id, shipped_at=datetime.now(UTC))


@pytest.fixture()
def order_delivered(order_id):
    return OrderDelivered(order_id=order_id, delivered_at=datetime.now(UTC))


@pytest.fixture()
def order_cancelled(order_id):
    return OrderCancelled(
        order_id=order_id,
        items=json.dumps([{"product_id": "argan-oil", "quantity": 2}]),
        reason="Out of delivery area",
        cancelled_at=datetime.now(UTC),
    )


@pytest.fixture()
def order_refunded(order_id):
    return OrderRefunded(order_id=order_id, refund_amount=500.0, refunded_at=datetime.now(UTC))


# ---------------------------------------------------------------------------
# Given steps (event sourcing via protean.testing)
# ---------------------------------------------------------------------------
@given("a cash on delivery order was placed", target_fixture="order")
def _(cod_order_placed):
    return given_(Order, cod_order_placed)


@given("a UPI order was placed", target_fixture="order")
def _(upi_order_placed):
    return given_(Order, upi_order_placed)


@given("the buyer reported the payment", target_fixture="order")
def _(order, payment_reported):
    return order.after(payment_reported)


@given("the order was confirmed", target_fixture="order")
def _(order, order_confirmed):
    return order.after(order_confirmed)


@given("the order is processing", target_fixture="order")
def _(order, order_processing):
    return order.after(order_processing)


@given("the order was shipped", target_fixture="order")
def _(order, order_shipped):
    return order.after(order_shipped)


@given("the order was delivered", target_fixture="order")
def _(order, order_delivered):
    return order.after(order_delivered)


@given("the order was cancelled", target_fixture="order")
def _(order, order_cancelled):
    return order.after(order_cancelled)


@given("the order was refunded", target_fixture="order")
def _(order, order_refunded):
    return order.after(order_refunded)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order, status):
    assert order.status == status


@then("the order action fails with a validation error")
def _(order):
    assert order.rejected
    assert isinstance(order.rejection, ValidationError)


@then("the transition is rejected as illegal")
def _(order):
    assert order.rejected
    assert isinstance(order.rejection, IllegalTransitionError)


@then("the transition is not permitted for the actor")
def _(order):
    assert order.rejected
    assert isinstance(order.rejection, TransitionNotPermittedError)


@then("no order event is raised")
def _(order):
    assert len(order.events) == 0


@then(parsers.cfparse("an {event_type} order event is raised"))
def _(order, event_type):
    assert _ORDER_EVENT_CLASSES[event_type] in order.events


@then(parsers.cfparse("a {event_type} order event is raised"))
def _(order, event_type):
    assert _ORDER_EVENT_CLASSES[event_type] in order.events
