"""Pydantic request/response schemas for the Ordering API: carts and orders."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.ordering.order.order import OrderStatus

# --- Cart Request Schemas ---


class AddToCartRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                }
            ]
        }
    }

    product_id: str
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    quantity: int


# --- Order Request Schemas ---


class CreateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address_id": "addr-001",
                }
            ]
        }
    }

    shipping_address_id: str


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus


# --- Cart Response Schemas ---


class CartProduct(BaseModel):
    id: str
    name: str
    slug: str
    sku: str
    price: float
    stock: int


class CartItemResponse(BaseModel):
    product: CartProduct
    quantity: int
    line_total: float


class CartResponse(BaseModel):
    items: list[CartItemResponse] = Field(default_factory=list)
    total_items: int = 0
    subtotal: float = 0.0

    @classmethod
    def from_view(cls, view) -> CartResponse:
        return cls(
            items=[
                CartItemResponse(
                    product=CartProduct(
                        id=str(line.product.id),
                        name=line.product.name,
                        slug=line.product.slug,
                        sku=line.product.sku,
                        price=line.product.price,
                        stock=line.product.stock,
                    ),
                    quantity=line.quantity,
                    line_total=line.line_total,
                )
                for line in view.items
            ],
            total_items=view.total_items,
            subtotal=view.subtotal,
        )


class CartValidationResponse(BaseModel):
    is_valid: bool
    errors: list[str]
    cart: CartResponse

    @classmethod
    def from_validation(cls, validation) -> CartValidationResponse:
        return cls(
            is_valid=validation.is_valid,
            errors=validation.errors,
            cart=CartResponse.from_view(validation.cart),
        )


# --- Order Response Schemas ---


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    price: float
    total: float


class OrderResponse(BaseModel):
    id: str
    order_number: str
    user_id: str
    status: str
    subtotal: float
    tax: float
    shipping: float
    total: float
    shipping_address_id: str
    items: list[OrderItemResponse] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            user_id=str(order.user_id),
            status=order.status,
            subtotal=order.subtotal,
            tax=order.tax,
            shipping=order.shipping,
            total=order.total,
            shipping_address_id=str(order.shipping_address_id),
            items=[
                OrderItemResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    price=item.price,
                    total=item.total,
                )
                for item in order.items
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
