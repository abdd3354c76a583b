"""Order creation — command and handler.

Turns a checked-out cart into an Order. Everything the handler writes
(the order, the stock decrements and the idempotency receipt) goes through
one unit of work, and every stock row is checked before any of them is
touched, so a failed checkout leaves no trace.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, TransactionError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.checkout.validation import validate_checkout
from storefront.domain import storefront
from storefront.errors import StockConflictError, UnauthenticatedError
from storefront.order.order import Order
from storefront.order.receipt import CheckoutReceipt
from storefront.order.status import PaymentMethod
from storefront.stock.stock import StockItem

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier()  # Empty when the request carried no session
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    items = Text(required=True)  # JSON: [{product_id, quantity, ...}]
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, choices=PaymentMethod)
    client_total = Float()
    idempotency_key = String(max_length=200)


def _load(value, default):
    if value is None:
        return default
    return json.loads(value) if isinstance(value, str) else value


def merge_lines(lines) -> dict:
    """Collapse lines for the same product into one, summing quantities. Keeps first-seen order."""
    merged = {}
    for line in lines:
        product_id = str(line["product_id"])
        merged[product_id] = merged.get(product_id, 0) + int(line["quantity"])
    return merged


def _receipt_key(customer_id, idempotency_key):
    return f"{customer_id}:{idempotency_key}"


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        if not command.customer_id:
            raise UnauthenticatedError()

        lines = _load(command.items, [])
        address = _load(command.shipping_address, {})
        validate_checkout(lines, address)

        receipts = current_domain.repository_for(CheckoutReceipt)
        receipt_key = None
        if command.idempotency_key:
            receipt_key = _receipt_key(command.customer_id, command.idempotency_key)
            try:
                receipt = receipts.get(receipt_key)
            except ObjectNotFoundError:
                receipt = None
            if receipt is not None:
                logger.info(
                    "Checkout retried with a known key, returning the existing order",
                    order_id=str(receipt.order_id),
                    customer_id=str(command.customer_id),
                )
                order = current_domain.repository_for(Order).get(receipt.order_id)
                return _result(order)

        quantities = merge_lines(lines)
        stock_repo = current_domain.repository_for(StockItem)

        stock_items = {}
        shortages = []
        for product_id, quantity in quantities.items():
            try:
                stock_item = stock_repo.get(product_id)
            except ObjectNotFoundError:
                shortages.append((product_id, quantity, 0))
                continue
            if not stock_item.covers(quantity):
                shortages.append((product_id, quantity, stock_item.on_hand))
            stock_items[product_id] = stock_item

        if shortages:
            logger.info(
                "Checkout rejected on stock conflict",
                customer_id=str(command.customer_id),
                shortages=shortages,
            )
            raise StockConflictError(shortages)

        items_data = [
            {
                "product_id": product_id,
                "name": stock_items[product_id].name,
                "image": stock_items[product_id].image,
                "unit_price": stock_items[product_id].unit_price,
                "quantity": quantity,
            }
            for product_id, quantity in quantities.items()
        ]

        order = Order.place(
            customer_id=command.customer_id,
            items_data=items_data,
            shipping_address=address,
            payment_method=command.payment_method,
            customer_name=command.customer_name,
            customer_email=command.customer_email,
        )

        if command.client_total is not None and round(command.client_total, 2) != order.total:
            logger.warning(
                "Client total differs from priced total",
                order_id=str(order.id),
                client_total=command.client_total,
                total=order.total,
            )

        for product_id, quantity in quantities.items():
            stock_items[product_id].take(quantity)
            stock_repo.add(stock_items[product_id])

        current_domain.repository_for(Order).add(order)

        if receipt_key:
            receipts.add(
                CheckoutReceipt.issue(
                    idempotency_key=receipt_key,
                    customer_id=command.customer_id,
                    order_id=order.id,
                    order_number=order.order_number,
                )
            )

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            payment_method=order.payment_method,
            total=order.total,
        )
        return _result(order)


def _result(order) -> dict:
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "payment_method": order.payment_method,
        "total": order.total,
    }


def _lost_stock_race(exc) -> bool:
    return isinstance(exc, ExpectedVersionError) or isinstance(exc.__cause__, ExpectedVersionError)


def submit_order(command: PlaceOrder, attempts: int = 3) -> dict:
    """Process ``PlaceOrder``, retrying when another checkout wrote the same stock rows first.

    The stock rows read by the handler are version checked when the unit of
    work commits. A checkout that loses that race wrote nothing, so it is run
    again against fresh stock; it then either succeeds or fails with
    ``StockConflictError``.
    """
    for attempt in range(1, attempts + 1):
        try:
            return current_domain.process(command, asynchronous=False)
        except (ExpectedVersionError, TransactionError) as exc:
            if not _lost_stock_race(exc):
                raise
            logger.warning(
                "Stock changed during checkout, retrying",
                customer_id=str(command.customer_id),
                attempt=attempt,
            )

    quantities = merge_lines(_load(command.items, []))
    stock_repo = current_domain.repository_for(StockItem)
    raise StockConflictError(
        [(product_id, quantity, stock_repo.get(product_id).on_hand) for product_id, quantity in quantities.items()]
    )
