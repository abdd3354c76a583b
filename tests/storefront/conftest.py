"""Shared fixtures for storefront tests."""

import json

import pytest
from protean import current_domain
from storefront.fanout import set_publisher
from storefront.fanout.memory import InMemoryBus
from storefront.mail import set_mailer
from storefront.mail.fake_mailer import FakeMailer
from storefront.order.creation import PlaceOrder, submit_order
from storefront.stock.management import StockProduct

SHIPPING = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "postal_code": "560001",
    "country": "India",
}


@pytest.fixture()
def bus():
    bus = InMemoryBus()
    set_publisher(bus)
    return bus


@pytest.fixture()
def mailer():
    mailer = FakeMailer()
    set_mailer(mailer)
    return mailer


@pytest.fixture()
def stock_product():
    """Return a helper that registers a product's stock and price."""

    def _stock(product_id="argan-oil", on_hand=10, unit_price=250.0, name=None, image=None):
        current_domain.process(
            StockProduct(
                product_id=product_id,
                name=name or product_id.replace("-", " ").title(),
                unit_price=unit_price,
                on_hand=on_hand,
                image=image,
            ),
            asynchronous=False,
        )
        return product_id

    return _stock


@pytest.fixture()
def place_order():
    """Return a helper that runs PlaceOrder and returns the handler result."""

    def _place(items=None, payment_method="COD", customer_id="buyer-001", shipping=None, **overrides):
        command = PlaceOrder(
            customer_id=customer_id,
            customer_name=overrides.pop("customer_name", "Asha Rao"),
            customer_email=overrides.pop("customer_email", "asha@example.com"),
            items=json.dumps(items if items is not None else [{"product_id": "argan-oil", "quantity": 1}]),
            shipping_address=json.dumps(shipping if shipping is not None else SHIPPING),
            payment_method=payment_method,
            **overrides,
        )
        return submit_order(command)

    return _place
