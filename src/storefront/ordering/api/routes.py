"""FastAPI routes for Ordering: the caller's cart and orders."""

from fastapi import APIRouter, Depends, Query

from storefront.ordering.api.schemas import (
    AddToCartRequest,
    CartResponse,
    CartValidationResponse,
    CreateOrderRequest,
    OrderResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from storefront.ordering.cart.service import CartService
from storefront.ordering.order.order import OrderStatus
from storefront.ordering.service import OrderService
from storefront.shared.api import Principal, admin_principal, current_principal, get_cart_service, get_order_service, ok

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(
    principal: Principal = Depends(current_principal),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    return ok(CartResponse.from_view(carts.get_cart(principal.user_id)))


@cart_router.post("/items")
async def add_to_cart(
    body: AddToCartRequest,
    principal: Principal = Depends(current_principal),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    view = carts.add_to_cart(principal.user_id, body.product_id, body.quantity)
    return ok(CartResponse.from_view(view), "Item added to cart")


@cart_router.put("/items/{product_id}")
async def update_cart_item(
    product_id: str,
    body: UpdateCartItemRequest,
    principal: Principal = Depends(current_principal),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    view = carts.update_cart_item(principal.user_id, product_id, body.quantity)
    return ok(CartResponse.from_view(view), "Cart updated")


@cart_router.delete("/items/{product_id}")
async def remove_from_cart(
    product_id: str,
    principal: Principal = Depends(current_principal),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    view = carts.remove_from_cart(principal.user_id, product_id)
    return ok(CartResponse.from_view(view), "Item removed from cart")


@cart_router.delete("")
async def clear_cart(
    principal: Principal = Depends(current_principal),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    carts.clear_cart(principal.user_id)
    return ok(message="Cart cleared")


@cart_router.get("/validate")
async def validate_cart(
    principal: Principal = Depends(current_principal),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    return ok(CartValidationResponse.from_validation(carts.validate_cart(principal.user_id)))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def create_order(
    body: CreateOrderRequest,
    principal: Principal = Depends(current_principal),
    orders: OrderService = Depends(get_order_service),
) -> dict:
    order = orders.create_order(principal.user_id, body.shipping_address_id)
    return ok(OrderResponse.from_order(order), "Order created successfully")


@order_router.get("")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: OrderStatus | None = None,
    principal: Principal = Depends(current_principal),
    orders: OrderService = Depends(get_order_service),
) -> dict:
    result = orders.get_orders(
        user_id=principal.scope,
        status=status.value if status else None,
        page=page,
        limit=limit,
    )
    return ok(
        {
            "orders": [OrderResponse.from_order(order) for order in result.items],
            "pagination": result.meta(),
        }
    )


@order_router.get("/{order_id}")
async def get_order(
    order_id: str,
    principal: Principal = Depends(current_principal),
    orders: OrderService = Depends(get_order_service),
) -> dict:
    return ok(OrderResponse.from_order(orders.get_order_by_id(order_id, principal.scope)))


@order_router.patch("/{order_id}/status", dependencies=[Depends(admin_principal)])
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    orders: OrderService = Depends(get_order_service),
) -> dict:
    order = orders.update_order_status(order_id, body.status.value)
    return ok(OrderResponse.from_order(order), "Order status updated")


@order_router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    principal: Principal = Depends(current_principal),
    orders: OrderService = Depends(get_order_service),
) -> dict:
    order = orders.cancel_order(order_id, principal.scope)
    return ok(OrderResponse.from_order(order), "Order cancelled successfully")
