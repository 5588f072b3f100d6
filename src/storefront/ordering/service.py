"""Order service: checkout and order lifecycle on top of the cart service.

Checkout runs in two phases. Everything that only reads (address ownership,
cart contents, cart validation, totals, order number) happens here, outside
any unit of work. The writes happen in ``PlaceOrder``'s handler, which is the
transaction boundary. Clearing the cart afterwards is best-effort: the order
already exists, so a failure there is logged and not raised.
"""

import json

from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from storefront.identity.address.address import fetch_address
from storefront.ordering.cart.service import CartService
from storefront.ordering.order.cancellation import CancelOrder
from storefront.ordering.order.numbering import generate_order_number
from storefront.ordering.order.order import Order, fetch_order
from storefront.ordering.order.placement import PlaceOrder
from storefront.ordering.order.status import UpdateOrderStatus
from storefront.ordering.pricing import DEFAULT_SHIPPING_COST, DEFAULT_TAX_RATE, compute_totals
from storefront.shared.errors import StorefrontError
from storefront.shared.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, paginate
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    def __init__(self, cart_service: CartService):
        self.cart_service = cart_service

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def create_order(
        self,
        user_id,
        shipping_address_id,
        tax_rate=DEFAULT_TAX_RATE,
        shipping_cost=DEFAULT_SHIPPING_COST,
    ) -> Order:
        fetch_address(shipping_address_id, user_id=user_id, message="Shipping address not found")

        cart = self.cart_service.get_cart(user_id)
        if cart.is_empty:
            raise StorefrontError("Cart is empty", 400, "CART_EMPTY")

        validation = self.cart_service.validate_cart(user_id)
        if not validation.is_valid:
            raise StorefrontError("Cart validation failed", 400, "CART_INVALID", details=validation.errors)

        cart = validation.cart
        totals = compute_totals(cart.subtotal, tax_rate=tax_rate, shipping_cost=shipping_cost)
        lines = [
            {
                "product_id": str(line.product.id),
                "name": line.product.name,
                "quantity": line.quantity,
                "price": line.price,
            }
            for line in cart.items
        ]

        command = PlaceOrder(
            order_number=generate_order_number(),
            user_id=str(user_id),
            shipping_address_id=str(shipping_address_id),
            items=json.dumps(lines),
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping=totals.shipping,
            total=totals.total,
        )
        try:
            order_id = current_domain.process(command, asynchronous=False)
        except ExpectedVersionError as exc:
            # Another checkout changed one of these products after it was loaded
            logger.info("checkout_stock_conflict", user_id=str(user_id), error=str(exc))
            raise StorefrontError(
                "Stock changed while placing the order. Please try again",
                400,
                "INSUFFICIENT_STOCK",
            ) from exc

        try:
            self.cart_service.clear_cart(user_id)
        except Exception as exc:
            logger.warning("cart_clear_failed", user_id=str(user_id), order_id=order_id, error=str(exc))

        return fetch_order(order_id)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_orders(self, user_id=None, status=None, page=DEFAULT_PAGE, limit=DEFAULT_LIMIT) -> Page:
        """Orders newest first, optionally narrowed to one user and/or status."""
        queryset = current_domain.repository_for(Order)._dao.query
        if user_id is not None:
            queryset = queryset.filter(user_id=str(user_id))
        if status is not None:
            queryset = queryset.filter(status=status)
        return paginate(queryset.order_by("-created_at"), page=page, limit=limit)

    def get_order_by_id(self, order_id, requesting_user_id=None) -> Order:
        order = fetch_order(order_id)
        order.assert_owned_by(requesting_user_id)
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def update_order_status(self, order_id, new_status) -> Order:
        current_domain.process(
            UpdateOrderStatus(order_id=str(order_id), status=new_status),
            asynchronous=False,
        )
        return fetch_order(order_id)

    def cancel_order(self, order_id, requesting_user_id=None) -> Order:
        current_domain.process(
            CancelOrder(
                order_id=str(order_id),
                requested_by=str(requesting_user_id) if requesting_user_id is not None else None,
            ),
            asynchronous=False,
        )
        return fetch_order(order_id)
