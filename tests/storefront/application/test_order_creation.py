"""Application tests for order creation via domain.process()."""

import json
import threading

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError
from storefront.domain import storefront
from storefront.errors import (
    EmptyCartError,
    IncompleteAddressError,
    InvalidQuantityError,
    StockConflictError,
    UnauthenticatedError,
)
from storefront.order.creation import PlaceOrder, submit_order
from storefront.order.order import Order
from storefront.order.receipt import CheckoutReceipt
from storefront.order.status import OrderStatus
from storefront.stock.stock import StockItem


def _on_hand(product_id):
    return current_domain.repository_for(StockItem).get(product_id).on_hand


def _order_count():
    return len(current_domain.event_store.store._stream_identifiers(Order.meta_.stream_category))


def _place_order_command():
    return PlaceOrder(
        customer_id="buyer-001",
        items=json.dumps([{"product_id": "argan-oil", "quantity": 1}]),
        shipping_address=json.dumps(
            {
                "name": "Asha Rao",
                "phone": "9876543210",
                "street": "12 MG Road",
                "city": "Bengaluru",
                "postal_code": "560001",
            }
        ),
        payment_method="COD",
    )


def _in_other_thread(fn):
    """Run ``fn`` to completion in its own thread and domain context."""
    outcome = {}

    def run():
        with storefront.domain_context():
            try:
                outcome["result"] = fn()
            except Exception as exc:
                outcome["error"] = exc

    thread = threading.Thread(target=run)
    thread.start()
    thread.join()
    return outcome


class TestPlaceOrder:
    def test_cod_order_for_1000_is_pending(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=10, unit_price=250.0)
        stock_product("serum", on_hand=5, unit_price=500.0)

        result = place_order(
            items=[
                {"product_id": "argan-oil", "quantity": 2},
                {"product_id": "serum", "quantity": 1},
            ]
        )

        assert result["status"] == OrderStatus.PENDING.value
        assert result["total"] == 1000.0
        assert result["order_number"].startswith("ORD-")

        order = current_domain.repository_for(Order).get(result["order_id"])
        assert order.total == 1000.0
        assert len(order.items) == 2
        assert str(order.customer_id) == "buyer-001"

    def test_upi_order_awaits_confirmation(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=3)
        result = place_order(payment_method="UPI")
        assert result["status"] == OrderStatus.PAYMENT_PENDING_CONFIRMATION.value

    def test_stock_is_decremented(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=5)
        place_order(items=[{"product_id": "argan-oil", "quantity": 3}])
        assert _on_hand("argan-oil") == 2

    def test_duplicate_lines_are_merged(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=5, unit_price=100.0)
        result = place_order(
            items=[
                {"product_id": "argan-oil", "quantity": 1},
                {"product_id": "argan-oil", "quantity": 2},
            ]
        )
        order = current_domain.repository_for(Order).get(result["order_id"])
        assert len(order.items) == 1
        assert order.items[0].quantity == 3
        assert order.total == 300.0

    def test_prices_come_from_stock_record(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=5, unit_price=120.0)
        result = place_order(
            items=[{"product_id": "argan-oil", "quantity": 1, "unit_price": 1.0}],
            client_total=1.0,
        )
        assert result["total"] == 120.0


class TestPlaceOrderRejections:
    def test_unauthenticated(self, stock_product, place_order):
        stock_product("argan-oil")
        with pytest.raises(UnauthenticatedError):
            place_order(customer_id=None)
        assert _on_hand("argan-oil") == 10

    def test_empty_cart(self, place_order):
        with pytest.raises(EmptyCartError):
            place_order(items=[])

    def test_invalid_quantity(self, stock_product, place_order):
        stock_product("argan-oil")
        with pytest.raises(InvalidQuantityError):
            place_order(items=[{"product_id": "argan-oil", "quantity": 0}])

    def test_incomplete_address(self, stock_product, place_order):
        stock_product("argan-oil")
        with pytest.raises(IncompleteAddressError) as exc:
            place_order(shipping={"name": "Asha Rao", "phone": "98765"})
        assert exc.value.missing_fields == ["street", "city", "postal_code"]

    def test_stale_cart_quantity_is_a_stock_conflict(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=1)

        with pytest.raises(StockConflictError) as exc:
            place_order(items=[{"product_id": "argan-oil", "quantity": 3, "stock": 5}])

        assert exc.value.shortages == [("argan-oil", 3, 1)]
        assert _on_hand("argan-oil") == 1
        assert _order_count() == 0

    def test_unknown_product_is_a_stock_conflict(self, place_order):
        with pytest.raises(StockConflictError) as exc:
            place_order(items=[{"product_id": "ghost", "quantity": 1}])
        assert exc.value.shortages == [("ghost", 1, 0)]

    def test_partial_shortage_writes_nothing(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=5)
        stock_product("serum", on_hand=1)

        with pytest.raises(StockConflictError):
            place_order(
                items=[
                    {"product_id": "argan-oil", "quantity": 2},
                    {"product_id": "serum", "quantity": 2},
                ]
            )

        assert _on_hand("argan-oil") == 5
        assert _on_hand("serum") == 1
        assert _order_count() == 0


class TestLastUnit:
    def test_second_buyer_for_last_unit_gets_conflict(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=1)

        place_order(customer_id="buyer-001")
        with pytest.raises(StockConflictError):
            place_order(customer_id="buyer-002")

        assert _on_hand("argan-oil") == 0
        assert _order_count() == 1

    def test_checkout_overtaken_between_read_and_write_gets_conflict(self, stock_product, place_order, monkeypatch):
        """Another buyer commits the last unit after this checkout has read the stock row."""
        stock_product("argan-oil", on_hand=1)
        take = StockItem.take
        rival = {}

        def take_after_rival_checkout(stock_item, quantity):
            if not rival:
                rival["started"] = True
                rival.update(_in_other_thread(lambda: place_order(customer_id="buyer-002")))
            take(stock_item, quantity)

        monkeypatch.setattr(StockItem, "take", take_after_rival_checkout)

        with pytest.raises(StockConflictError):
            place_order(customer_id="buyer-001")

        assert "error" not in rival
        assert rival["result"]["status"] == OrderStatus.PENDING.value
        assert _on_hand("argan-oil") == 0
        assert _order_count() == 1

    def test_retry_after_version_conflict_places_the_order(self, stock_product, monkeypatch):
        stock_product("argan-oil", on_hand=5)
        process = storefront.process
        calls = []

        def process_losing_first_race(command, asynchronous=False):
            calls.append(command)
            if len(calls) == 1:
                raise ExpectedVersionError("Wrong expected version: 0 (Stream: stock, Stream Version: 1)")
            return process(command, asynchronous=asynchronous)

        monkeypatch.setattr(storefront, "process", process_losing_first_race)

        result = submit_order(_place_order_command())

        assert len(calls) == 2
        assert result["status"] == OrderStatus.PENDING.value
        assert _on_hand("argan-oil") == 4

    def test_repeated_version_conflicts_end_in_stock_conflict(self, stock_product, monkeypatch):
        stock_product("argan-oil", on_hand=5)

        def always_stale(command, asynchronous=False):
            raise ExpectedVersionError("Wrong expected version")

        monkeypatch.setattr(storefront, "process", always_stale)

        with pytest.raises(StockConflictError) as exc:
            submit_order(_place_order_command())
        assert exc.value.shortages == [("argan-oil", 1, 5)]


class TestIdempotency:
    def test_retry_with_same_key_returns_existing_order(self, stock_product, place_order):
        stock_product("argan-oil", on_hand=5)

        first = place_order(idempotency_key="checkout-1")
        second = place_order(idempotency_key="checkout-1")

        assert second["order_id"] == first["order_id"]
        assert second["order_number"] == first["order_number"]
        assert _on_hand("argan-oil") == 4
        assert _order_count() == 1

    def test_receipt_is_recorded(self, stock_product, place_order):
        stock_product("argan-oil")
        result = place_order(idempotency_key="checkout-2")
        receipt = current_domain.repository_for(CheckoutReceipt).get("buyer-001:checkout-2")
        assert str(receipt.order_id) == result["order_id"]

    def test_keys_are_scoped_per_buyer(self, stock_product, place_order):
        stock_product("argan-oil")
        first = place_order(customer_id="buyer-001", idempotency_key="same-key")
        second = place_order(customer_id="buyer-002", idempotency_key="same-key")
        assert first["order_id"] != second["order_id"]

    def test_different_keys_place_separate_orders(self, stock_product, place_order):
        stock_product("argan-oil")
        first = place_order(idempotency_key="a")
        second = place_order(idempotency_key="b")
        assert first["order_id"] != second["order_id"]
        assert _on_hand("argan-oil") == 8
