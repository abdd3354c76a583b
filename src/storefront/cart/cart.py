"""Client-held shopping cart.

The cart lives on the buyer's device until checkout. It is a plain value
holder: no repository, no events. Each line carries the price and stock
ceiling the buyer last saw, which the checkout validator treats as
advisory. Quantity changes that would break the ceiling are rejected, never
clamped.
"""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront
from storefront.errors import InvalidQuantityError, StockExceededError

SNAPSHOT_KEY = "haircrew_cart"


@storefront.value_object
class CartLine:
    """One product in the cart, with the price and stock seen when it was added."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True)
    stock = Integer(required=True, min_value=0)
    image = String(max_length=1000)

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)


def _check_quantity(product_id, quantity, stock):
    if quantity is None or int(quantity) <= 0:
        raise InvalidQuantityError(product_id, quantity)
    if int(quantity) > int(stock):
        raise StockExceededError(product_id, quantity, stock)


class Cart:
    """Ordered collection of CartLines keyed by product id."""

    def __init__(self, lines=None):
        self._lines = {}
        for line in lines or []:
            self._lines[str(line.product_id)] = line

    @classmethod
    def from_snapshot(cls, snapshot):
        """Rebuild a cart from the list of dicts a client persisted under ``SNAPSHOT_KEY``."""
        return cls([CartLine(**entry) for entry in snapshot or []])

    def to_snapshot(self) -> list[dict]:
        return [line.to_dict() for line in self._lines.values()]

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def get(self, product_id):
        return self._lines.get(str(product_id))

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add(self, product_id, name, unit_price, stock, quantity=1, image=None) -> CartLine:
        """Add ``quantity`` units, merging with an existing line for the same product.

        ``stock`` refreshes the line's ceiling, and the merged quantity must fit under it.
        """
        if quantity is None or int(quantity) <= 0:
            raise InvalidQuantityError(product_id, quantity)
        existing = self.get(product_id)
        new_quantity = (existing.quantity if existing else 0) + int(quantity)
        _check_quantity(product_id, new_quantity, stock)

        line = CartLine(
            product_id=str(product_id),
            name=name,
            unit_price=unit_price,
            quantity=new_quantity,
            stock=stock,
            image=image,
        )
        self._lines[str(product_id)] = line
        return line

    def update_quantity(self, product_id, quantity) -> CartLine:
        existing = self.get(product_id)
        if existing is None:
            raise KeyError(str(product_id))
        _check_quantity(product_id, quantity, existing.stock)

        line = CartLine(**{**existing.to_dict(), "quantity": int(quantity)})
        self._lines[str(product_id)] = line
        return line

    def remove(self, product_id) -> None:
        self._lines.pop(str(product_id), None)

    def clear(self) -> None:
        self._lines.clear()

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    def is_empty(self) -> bool:
        return not self._lines

    def total(self) -> float:
        return round(sum(line.line_total for line in self._lines.values()), 2)

    def count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines.values())
