"""Storefront exceptions.

Checkout and transition failures extend Protean's ``ValidationError`` so the
domain keeps its usual ``{field: [messages]}`` payload; access failures are
plain exceptions carrying a user-facing message.
"""

from protean.exceptions import ValidationError


# ---------------------------------------------------------------------------
# Checkout validation
# ---------------------------------------------------------------------------
class CheckoutError(ValidationError):
    """Base for cart/address problems the buyer can correct and retry."""


class EmptyCartError(CheckoutError):
    def __init__(self):
        super().__init__({"cart": ["Cart is empty"]})


class InvalidQuantityError(CheckoutError):
    def __init__(self, product_id, quantity):
        self.product_id = str(product_id)
        self.quantity = quantity
        super().__init__({"quantity": [f"Quantity for product {product_id} must be at least 1, got {quantity}"]})


class StockExceededError(CheckoutError):
    def __init__(self, product_id, quantity, stock):
        self.product_id = str(product_id)
        self.quantity = quantity
        self.stock = stock
        super().__init__(
            {"quantity": [f"Only {stock} unit(s) of product {product_id} in stock, {quantity} requested"]}
        )


class IncompleteAddressError(CheckoutError):
    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__({field: ["This field is required"] for field in self.missing_fields})


# ---------------------------------------------------------------------------
# Order creation and state machine
# ---------------------------------------------------------------------------
class StockConflictError(ValidationError):
    """Authoritative stock no longer covers the requested quantities."""

    def __init__(self, shortages):
        # shortages: list of (product_id, requested, available)
        self.shortages = list(shortages)
        super().__init__(
            {
                "stock": [
                    f"Product {product_id}: requested {requested}, available {available}"
                    for product_id, requested, available in self.shortages
                ]
            }
        )


class IllegalTransitionError(ValidationError):
    def __init__(self, from_status, to_status, reason=None):
        self.from_status = getattr(from_status, "value", from_status)
        self.to_status = getattr(to_status, "value", to_status)
        message = reason or f"Cannot transition from {self.from_status} to {self.to_status}"
        super().__init__({"status": [message]})


class TransitionNotPermittedError(ValidationError):
    """The transition is legal, but not for this actor."""

    def __init__(self, from_status, to_status, actor):
        self.from_status = getattr(from_status, "value", from_status)
        self.to_status = getattr(to_status, "value", to_status)
        self.actor = getattr(actor, "value", actor)
        super().__init__(
            {"status": [f"{self.actor} may not move an order from {self.from_status} to {self.to_status}"]}
        )


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------
class AccessError(Exception):
    def __init__(self, message):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(AccessError):
    def __init__(self, message="Please sign in and retry"):
        super().__init__(message)


class ForbiddenError(AccessError):
    def __init__(self, message="You are not allowed to access this order"):
        super().__init__(message)
