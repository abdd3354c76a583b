"""StockItem aggregate (CQRS) — authoritative stock and price per product.

The order creation handler re-reads these rows inside its unit of work, so
the stock count seen here is the one that decides whether a checkout goes
through. Prices are read from here too; the client's cart snapshot is only
a hint.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.aggregate
class StockItem:
    product_id = Identifier(identifier=True, required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    image = String(max_length=1000)
    on_hand = Integer(default=0)
    updated_at = DateTime()

    @invariant.post
    def on_hand_cannot_be_negative(self):
        if self.on_hand is not None and self.on_hand < 0:
            raise ValidationError({"on_hand": ["Stock cannot go below zero"]})

    @classmethod
    def stock(cls, product_id, name, unit_price, on_hand=0, image=None):
        return cls(
            product_id=str(product_id),
            name=name,
            unit_price=unit_price,
            image=image,
            on_hand=on_hand,
            updated_at=datetime.now(UTC),
        )

    def covers(self, quantity) -> bool:
        return (self.on_hand or 0) >= int(quantity)

    def take(self, quantity):
        """Remove ``quantity`` units sold by an order."""
        if int(quantity) <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if not self.covers(quantity):
            raise ValidationError({"on_hand": [f"Only {self.on_hand} unit(s) of {self.product_id} left"]})
        self.on_hand = (self.on_hand or 0) - int(quantity)
        self.updated_at = datetime.now(UTC)

    def put_back(self, quantity):
        """Return ``quantity`` units, e.g. from a cancelled order."""
        if int(quantity) <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.on_hand = (self.on_hand or 0) + int(quantity)
        self.updated_at = datetime.now(UTC)

    def reprice(self, unit_price):
        self.unit_price = unit_price
        self.updated_at = datetime.now(UTC)
