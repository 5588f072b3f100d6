"""Order placement: command and handler.

The handler body is the checkout's unit of work: stock is re-checked for every
line before anything is written, then the order is created and each product's
stock is decremented. Any error rolls the whole unit back.
"""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product, find_product
from storefront.domain import logger, storefront
from storefront.ordering.order.order import Order
from storefront.ordering.pricing import OrderTotals
from storefront.shared.errors import StorefrontError


@storefront.command(part_of="Order")
class PlaceOrder:
    order_number = String(required=True, max_length=50)
    user_id = Identifier(required=True)
    shipping_address_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, name, quantity, price}
    subtotal = Float(required=True)
    tax = Float(required=True)
    shipping = Float(required=True)
    total = Float(required=True)


def _reserve(lines):
    """Load each product fresh and check it can still cover its line."""
    reserved = []
    for line in lines:
        product = find_product(line["product_id"])
        if product is None or not product.is_active:
            raise StorefrontError(
                f"Product {line.get('name', line['product_id'])} is no longer available",
                400,
                "PRODUCT_UNAVAILABLE",
            )
        if not product.is_available(line["quantity"]):
            raise StorefrontError(
                f"Insufficient stock for {product.name}. Available: {product.stock}",
                400,
                "INSUFFICIENT_STOCK",
            )
        reserved.append((product, line["quantity"]))
    return reserved


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = json.loads(command.items) if isinstance(command.items, str) else command.items
        reserved = _reserve(lines)

        order = Order.place(
            order_number=command.order_number,
            user_id=command.user_id,
            shipping_address_id=command.shipping_address_id,
            lines=lines,
            totals=OrderTotals(
                subtotal=command.subtotal,
                tax=command.tax,
                shipping=command.shipping,
                total=command.total,
            ),
        )
        current_domain.repository_for(Order).add(order)

        product_repo = current_domain.repository_for(Product)
        for product, quantity in reserved:
            product.reserve_stock(quantity)
            product_repo.add(product)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(order.user_id),
            total=order.total,
        )
        return str(order.id)
