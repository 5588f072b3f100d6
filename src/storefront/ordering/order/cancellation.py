"""Order cancellation: command and handler.

Cancelling is a compensating action: the status change and the stock
restoration for every item commit together or not at all.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product, find_product
from storefront.domain import logger, storefront
from storefront.ordering.order.order import Order, fetch_order


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requested_by = Identifier()  # None when an admin cancels


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = fetch_order(command.order_id)
        order.assert_owned_by(command.requested_by)
        order.cancel(cancelled_by=command.requested_by)

        product_repo = current_domain.repository_for(Product)
        for item in order.items:
            product = find_product(item.product_id)
            if product is None:
                # Ordered products are deactivated, never deleted
                continue
            product.restore_stock(item.quantity)
            product_repo.add(product)

        current_domain.repository_for(Order).add(order)
        logger.info(
            "order_cancelled",
            order_id=str(order.id),
            cancelled_by=str(command.requested_by) if command.requested_by else "admin",
            items=len(order.items),
        )
