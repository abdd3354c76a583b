"""Pydantic request/response schemas for the storefront order API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Field names on the wire are camelCase, matching
what the storefront client already sends.

Quantities and address fields are deliberately loose here: a zero quantity
or a blank city is a checkout problem reported by the domain with a proper
message, not a schema rejection.
"""

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingSchema(_CamelModel):
    name: str | None = None
    phone: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = Field(default=None, alias="postalCode")
    country: str | None = "India"


class CartItemSchema(_CamelModel):
    product_id: str = Field(alias="productId")
    quantity: int
    name: str | None = None
    price: float | None = None
    stock: int | None = None
    image: str | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(_CamelModel):
    method: str = Field(pattern="^(COD|UPI)$")
    items: list[CartItemSchema]
    amount: float | None = None
    shipping: ShippingSchema
    idempotency_key: str | None = Field(default=None, alias="idempotencyKey")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "method": "UPI",
                    "items": [{"productId": "argan-oil-100ml", "quantity": 2, "price": 499.0}],
                    "amount": 998.0,
                    "shipping": {
                        "name": "Asha Rao",
                        "phone": "9876543210",
                        "street": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "postalCode": "560001",
                        "country": "India",
                    },
                    "idempotencyKey": "3f0c8a4e-checkout-1",
                }
            ]
        },
    )


class ChangeStatusRequest(_CamelModel):
    order_id: str = Field(alias="orderId")
    new_status: str = Field(alias="newStatus")
    expected_status: str | None = Field(default=None, alias="expectedStatus")
    reason: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class UpiInstructionsResponse(_CamelModel):
    link: str
    payee_id: str = Field(alias="payeeId")
    payee_name: str = Field(alias="payeeName")
    amount: str
    order_number: str = Field(alias="orderNumber")


class CreateOrderResponse(_CamelModel):
    id: str
    order_number: str = Field(alias="orderNumber")
    status: str
    total: float
    upi: UpiInstructionsResponse | None = None


class OrderStatusResponse(_CamelModel):
    order_id: str = Field(alias="orderId")
    status: str


class OrderItemResponse(_CamelModel):
    product_id: str = Field(alias="productId")
    name: str
    image: str | None = None
    unit_price: float = Field(alias="unitPrice")
    quantity: int
    line_total: float = Field(alias="lineTotal")


class OrderResponse(_CamelModel):
    id: str
    order_number: str = Field(alias="orderNumber")
    status: str
    payment_method: str = Field(alias="paymentMethod")
    payment_status: str = Field(alias="paymentStatus")
    total: float
    currency: str
    items: list[OrderItemResponse]
    shipping: ShippingSchema
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class OrderSummaryResponse(_CamelModel):
    id: str
    order_number: str = Field(alias="orderNumber")
    status: str
    payment_method: str | None = Field(default=None, alias="paymentMethod")
    payment_status: str | None = Field(default=None, alias="paymentStatus")
    total: float | None = None
    item_count: int = Field(default=0, alias="itemCount")
    created_at: str | None = Field(default=None, alias="createdAt")


class OrderHistoryResponse(_CamelModel):
    orders: list[OrderSummaryResponse]
    total: int
    page: int
    page_size: int = Field(alias="pageSize")
