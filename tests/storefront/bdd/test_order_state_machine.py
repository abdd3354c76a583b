"""BDD tests for the order status state machine."""

import pytest
from pytest_bdd import parsers, scenarios, when
from storefront.order.status import Actor
from storefront.order.transitions import ChangeOrderStatus
from storefront.settlement.self_report import ReportUpiPayment

scenarios("features/order_state_machine.feature")


@pytest.fixture(autouse=True)
def _capture_fanout(bus, mailer):
    """Capture channel messages and emails raised by the handlers."""


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the admin moves the order to "{status}"'), target_fixture="order")
def _(order, order_id, status):
    return order.process(ChangeOrderStatus(order_id=order_id, new_status=status, actor=Actor.ADMIN.value))


@when(parsers.cfparse('the buyer moves the order to "{status}"'), target_fixture="order")
def _(order, order_id, customer_id, status):
    return order.process(
        ChangeOrderStatus(order_id=order_id, new_status=status, actor=Actor.BUYER.value, actor_id=customer_id)
    )


@when(
    parsers.cfparse('the admin, expecting "{expected}", moves the order to "{status}"'),
    target_fixture="order",
)
def _(order, order_id, status, expected):
    return order.process(
        ChangeOrderStatus(order_id=order_id, new_status=status, actor=Actor.ADMIN.value, expected_status=expected)
    )


@when("the buyer reports the UPI payment", target_fixture="order")
def _(order, order_id, customer_id):
    return order.process(ReportUpiPayment(order_id=order_id, customer_id=customer_id))
