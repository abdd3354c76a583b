"""Checkout validation.

Runs on the buyer's device before submission and again on the server before
an order is written. The checks run in a fixed order and the first failure
is raised: empty cart, bad quantity, stock ceiling, then address.
"""

from storefront.errors import (
    EmptyCartError,
    IncompleteAddressError,
    InvalidQuantityError,
    StockExceededError,
)

REQUIRED_ADDRESS_FIELDS = ("name", "phone", "street", "city", "postal_code")


def _field(line, name):
    if isinstance(line, dict):
        return line.get(name)
    return getattr(line, name, None)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def missing_address_fields(address) -> list[str]:
    address = address or {}
    return [field for field in REQUIRED_ADDRESS_FIELDS if _is_blank(_field(address, field))]


def validate_checkout(lines, address) -> None:
    """Raise the first ``CheckoutError`` that applies to this cart and address.

    ``lines`` may be a ``Cart``, a list of ``CartLine`` or a list of dicts.
    A line without a ``stock`` value skips the ceiling check; the server's
    authoritative check covers it.
    """
    lines = list(lines or [])
    if not lines:
        raise EmptyCartError()

    for line in lines:
        quantity = _field(line, "quantity")
        if quantity is None or int(quantity) <= 0:
            raise InvalidQuantityError(_field(line, "product_id"), quantity)

    for line in lines:
        stock = _field(line, "stock")
        if stock is not None and int(_field(line, "quantity")) > int(stock):
            raise StockExceededError(_field(line, "product_id"), _field(line, "quantity"), stock)

    missing = missing_address_fields(address)
    if missing:
        raise IncompleteAddressError(missing)
