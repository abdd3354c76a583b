"""FastAPI routes for storefront orders — checkout, status changes and lookups."""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.auth import Principal, current_principal
from storefront.api.schemas import (
    ChangeStatusRequest,
    CreateOrderRequest,
    CreateOrderResponse,
    OrderHistoryResponse,
    OrderItemResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderSummaryResponse,
    ShippingSchema,
    UpiInstructionsResponse,
)
from storefront.errors import UnauthenticatedError
from storefront.order.creation import PlaceOrder, submit_order
from storefront.order.order import Order
from storefront.order.status import Actor, OrderStatus, PaymentMethod, parse_status
from storefront.order.transitions import ChangeOrderStatus
from storefront.projections.order_summary import OrderSummary
from storefront.settlement.self_report import ReportUpiPayment
from storefront.settlement.upi import upi_instructions

order_router = APIRouter(prefix="/order", tags=["orders"])


def _require(principal: Principal | None) -> Principal:
    if principal is None:
        raise UnauthenticatedError()
    return principal


def _iso(value):
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=CreateOrderResponse)
async def create_order(
    body: CreateOrderRequest,
    principal: Principal | None = Depends(current_principal),
) -> CreateOrderResponse:
    items = [
        {
            "product_id": item.product_id,
            "quantity": item.quantity,
            "name": item.name,
            "unit_price": item.price,
            "stock": item.stock,
            "image": item.image,
        }
        for item in body.items
    ]
    command = PlaceOrder(
        customer_id=principal.user_id if principal else None,
        customer_name=principal.name if principal else None,
        customer_email=principal.email if principal else None,
        items=json.dumps(items),
        shipping_address=json.dumps(body.shipping.model_dump()),
        payment_method=body.method,
        client_total=body.amount,
        idempotency_key=body.idempotency_key,
    )
    result = submit_order(command)

    upi = None
    if result["payment_method"] == PaymentMethod.UPI.value:
        upi = UpiInstructionsResponse(**upi_instructions(result["order_number"], result["total"]))

    return CreateOrderResponse(
        id=result["order_id"],
        order_number=result["order_number"],
        status=result["status"],
        total=result["total"],
        upi=upi,
    )


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------
@order_router.post("/status", response_model=OrderStatusResponse)
async def change_order_status(
    body: ChangeStatusRequest,
    principal: Principal | None = Depends(current_principal),
) -> OrderStatusResponse:
    """Admin status change; a PAID request from the owning buyer is their payment self-report."""
    principal = _require(principal)
    target = parse_status(body.new_status)

    if target == OrderStatus.PAID and not principal.is_admin:
        command = ReportUpiPayment(order_id=body.order_id, customer_id=principal.user_id)
    else:
        command = ChangeOrderStatus(
            order_id=body.order_id,
            new_status=target.value,
            actor=(Actor.ADMIN if principal.is_admin else Actor.BUYER).value,
            actor_id=principal.user_id,
            expected_status=body.expected_status,
            reason=body.reason,
        )
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=body.order_id, status=status)


@order_router.post("/{order_id}/confirm-upi", response_model=OrderStatusResponse)
async def confirm_upi_payment(
    order_id: str,
    principal: Principal | None = Depends(current_principal),
) -> OrderStatusResponse:
    """The buyer's "I've paid" button."""
    principal = _require(principal)
    command = ReportUpiPayment(order_id=order_id, customer_id=principal.user_id)
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
@order_router.get("/history", response_model=OrderHistoryResponse)
async def order_history(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    principal: Principal | None = Depends(current_principal),
) -> OrderHistoryResponse:
    """The caller's orders, newest first."""
    principal = _require(principal)
    results = (
        current_domain.repository_for(OrderSummary)
        ._dao.query.filter(customer_id=principal.user_id)
        .order_by("-created_at")
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return OrderHistoryResponse(
        orders=[
            OrderSummaryResponse(
                id=str(s.order_id),
                order_number=s.order_number,
                status=s.status,
                payment_method=s.payment_method,
                payment_status=s.payment_status,
                total=s.total,
                item_count=s.item_count or 0,
                created_at=_iso(s.created_at),
            )
            for s in results.items
        ],
        total=results.total,
        page=page,
        page_size=page_size,
    )


@order_router.get("", response_model=OrderResponse)
async def get_order(
    id: str = Query(...),
    principal: Principal | None = Depends(current_principal),
) -> OrderResponse:
    """One order, visible to the buyer who placed it and to admins."""
    principal = _require(principal)
    order = current_domain.repository_for(Order).get(id)
    if not (principal.is_admin or order.is_owned_by(principal.user_id)):
        # Someone else's order is reported as missing, not as forbidden
        raise ObjectNotFoundError(f"Order with id {id} does not exist")

    address = order.shipping_address.to_dict() if order.shipping_address else {}
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        total=order.total,
        currency=order.currency,
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                name=item.name,
                image=item.image,
                unit_price=item.unit_price,
                quantity=item.quantity,
                line_total=item.line_total,
            )
            for item in order.items
        ],
        shipping=ShippingSchema(**address),
        created_at=_iso(order.created_at),
        updated_at=_iso(order.updated_at),
    )
