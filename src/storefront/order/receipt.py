"""CheckoutReceipt aggregate (CQRS) — remembers which order a checkout key produced.

A buyer whose connection drops after submitting may retry with the same
idempotency key; the receipt lets the creation handler hand back the order
it already wrote instead of placing a second one.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.aggregate
class CheckoutReceipt:
    idempotency_key = String(identifier=True, required=True, max_length=255)
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    issued_at = DateTime()

    @classmethod
    def issue(cls, idempotency_key, customer_id, order_id, order_number):
        return cls(
            idempotency_key=idempotency_key,
            customer_id=str(customer_id),
            order_id=str(order_id),
            order_number=order_number,
            issued_at=datetime.now(UTC),
        )
