"""FastAPI endpoints for the cart and orders."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.errors import AccessDeniedError, NotFoundError
from storefront.identity.api.dependencies import admin_session, current_session
from storefront.identity.tokens import SessionClaims
from storefront.ordering.api.schemas import (
    AdminNoteRequest,
    CartIssueResponse,
    CartValidationResponse,
    OrderIdResponse,
    OrderStatusResponse,
    PlaceOrderRequest,
    PricedLineResponse,
    StatusResponse,
    TransitionOrderRequest,
    ValidateCartRequest,
)
from storefront.ordering.cart.cart import Cart, revalidate_cart
from storefront.ordering.order.order import Order
from storefront.ordering.order.placement import PlaceOrder, submit_order
from storefront.ordering.order.transitions import AddAdminNote, TransitionOrder
from storefront.shared.queries import fetch_all

cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _vo_dict(vo, fields):
    if vo is None:
        return None
    return {name: getattr(vo, name) for name in fields}


def order_view(order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "user_id": str(order.user_id),
        "status": order.status,
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "name": item.name,
                "sku": item.sku,
                "image": item.image,
                "price": item.price,
                "quantity": item.quantity,
                "subtotal": item.subtotal,
            }
            for item in order.items
        ],
        "shipping_address": _vo_dict(
            order.shipping_address,
            ("first_name", "last_name", "street", "city", "state", "zip_code", "country", "phone"),
        ),
        "shipping_method": _vo_dict(order.shipping_method, ("method_id", "name", "price", "estimated_days")),
        "payment_details": _vo_dict(
            order.payment_details,
            ("method", "card_last4", "card_brand", "paypal_email", "paypal_transaction_id", "transaction_id"),
        ),
        "subtotal": order.pricing.subtotal,
        "shipping_cost": order.pricing.shipping_cost,
        "tax": order.pricing.tax,
        "discount": order.pricing.discount,
        "total": order.pricing.total,
        "tracking_number": order.tracking_number,
        "carrier": order.carrier,
        "customer_note": order.customer_note,
        "paid_at": order.paid_at.isoformat() if order.paid_at else None,
        "shipped_at": order.shipped_at.isoformat() if order.shipped_at else None,
        "delivered_at": order.delivered_at.isoformat() if order.delivered_at else None,
        "cancelled_at": order.cancelled_at.isoformat() if order.cancelled_at else None,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }


def _visible_order(order, claims: SessionClaims):
    if not claims.is_admin and str(order.user_id) != claims.user_id:
        raise AccessDeniedError("You can only view your own orders")
    return order


# --- Cart endpoints ---


@cart_router.post("/validate", response_model=CartValidationResponse)
async def validate_cart(body: ValidateCartRequest) -> CartValidationResponse:
    cart = Cart.from_lines([line.model_dump() for line in body.items])
    result = revalidate_cart(cart)
    return CartValidationResponse(
        valid=result.is_valid,
        lines=[PricedLineResponse(**line.to_dict()) for line in result.lines],
        issues=[
            CartIssueResponse(
                product_id=issue.product_id,
                reason=issue.reason,
                requested=issue.requested,
                available=issue.available,
            )
            for issue in result.issues
        ],
        subtotal=result.subtotal,
    )


# --- Order endpoints ---


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, claims: SessionClaims = Depends(current_session)) -> OrderIdResponse:
    command = PlaceOrder(
        user_id=claims.user_id,
        items=json.dumps([line.model_dump() for line in body.items]),
        shipping_address=body.shipping_address.model_dump_json(),
        shipping_method=body.shipping_method.model_dump_json(),
        payment_details=body.payment_details.model_dump_json(),
        tax=body.tax,
        discount=body.discount,
        customer_note=body.customer_note,
    )
    result = submit_order(command)
    return OrderIdResponse(order_id=result)


@order_router.get("")
async def list_orders(status: str | None = None, claims: SessionClaims = Depends(current_session)) -> list[dict]:
    filters = {}
    if not claims.is_admin:
        filters["user_id"] = claims.user_id
    if status:
        filters["status"] = status

    dao = current_domain.repository_for(Order)._dao
    orders = fetch_all(dao.query.filter(**filters) if filters else dao.query)
    orders.sort(key=lambda o: o.created_at, reverse=True)
    return [order_view(o) for o in orders]


@order_router.get("/by-number/{order_number}")
async def get_order_by_number(order_number: str, claims: SessionClaims = Depends(current_session)) -> dict:
    matches = current_domain.repository_for(Order)._dao.query.filter(order_number=order_number).all().items
    if not matches:
        raise NotFoundError(f"Order {order_number} not found")
    return order_view(_visible_order(matches[0], claims))


@order_router.get("/{order_id}")
async def get_order(order_id: str, claims: SessionClaims = Depends(current_session)) -> dict:
    order = current_domain.repository_for(Order).get(order_id)
    return order_view(_visible_order(order, claims))


@order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def transition_order(
    order_id: str, body: TransitionOrderRequest, claims: SessionClaims = Depends(current_session)
) -> OrderStatusResponse:
    command = TransitionOrder(
        order_id=order_id,
        status=body.status,
        actor_id=claims.user_id,
        actor_role=claims.role,
        tracking_number=body.tracking_number,
        carrier=body.carrier,
        transaction_id=body.transaction_id,
        reason=body.reason,
    )
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)


@order_router.post("/{order_id}/notes", response_model=StatusResponse)
async def add_admin_note(
    order_id: str, body: AdminNoteRequest, claims: SessionClaims = Depends(admin_session)
) -> StatusResponse:
    command = AddAdminNote(
        order_id=order_id,
        note=body.note,
        actor_id=claims.user_id,
        actor_role=claims.role,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
