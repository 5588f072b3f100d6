"""Cart service: prices and validates the per-user cart held in a CartStore.

The store keeps only quantities. Prices always come from the live product, so
the cart view reflects the catalogue as it is now, and products that vanished
or were deactivated simply drop out of the view.
"""

from dataclasses import dataclass, field

from storefront.catalogue.product.product import Product, fetch_product, find_product
from storefront.ordering.cart.store import CartStore
from storefront.shared.errors import StorefrontError
from storefront.shared.money import line_total, round_money
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int

    @property
    def price(self) -> float:
        return self.product.price

    @property
    def line_total(self) -> float:
        return line_total(self.product.price, self.quantity)


@dataclass(frozen=True)
class CartView:
    items: list[CartLine] = field(default_factory=list)
    total_items: int = 0
    subtotal: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class CartValidation:
    is_valid: bool
    errors: list[str]
    cart: CartView


def _insufficient_stock(product) -> StorefrontError:
    return StorefrontError(
        f"Only {product.stock} items available in stock",
        400,
        "INSUFFICIENT_STOCK",
    )


def _ensure_purchasable(product_id):
    product = fetch_product(product_id)
    if not product.is_active:
        raise StorefrontError("Product is not available", 400, "PRODUCT_UNAVAILABLE")
    return product


class CartService:
    def __init__(self, store: CartStore):
        self.store = store

    def get_cart(self, user_id) -> CartView:
        entries = self.store.entries(user_id)
        if not entries:
            return CartView()

        lines = []
        for product_id, quantity in entries.items():
            product = find_product(product_id)
            if product is None or not product.is_active:
                continue
            lines.append(CartLine(product=product, quantity=quantity))

        self.store.touch(user_id)
        return CartView(
            items=lines,
            total_items=sum(line.quantity for line in lines),
            subtotal=round_money(sum(line.line_total for line in lines)),
        )

    def add_to_cart(self, user_id, product_id, quantity: int) -> CartView:
        """Add ``quantity`` (may be negative) to the stored quantity."""
        product = _ensure_purchasable(product_id)

        new_quantity = self.store.quantity(user_id, product_id) + quantity
        if new_quantity > product.stock:
            raise _insufficient_stock(product)

        if new_quantity <= 0:
            self.store.remove(user_id, product_id)
        else:
            self.store.set_quantity(user_id, product_id, new_quantity)

        logger.info("cart_item_added", user_id=str(user_id), product_id=str(product_id), quantity=new_quantity)
        return self.get_cart(user_id)

    def update_cart_item(self, user_id, product_id, quantity: int) -> CartView:
        """Set the stored quantity; zero removes the entry."""
        if quantity < 0:
            raise StorefrontError("Quantity cannot be negative", 400, "INVALID_QUANTITY")

        product = _ensure_purchasable(product_id)
        if quantity > product.stock:
            raise _insufficient_stock(product)

        if quantity == 0:
            self.store.remove(user_id, product_id)
        else:
            self.store.set_quantity(user_id, product_id, quantity)

        logger.info("cart_item_updated", user_id=str(user_id), product_id=str(product_id), quantity=quantity)
        return self.get_cart(user_id)

    def remove_from_cart(self, user_id, product_id) -> CartView:
        self.store.remove(user_id, product_id)
        logger.info("cart_item_removed", user_id=str(user_id), product_id=str(product_id))
        return self.get_cart(user_id)

    def clear_cart(self, user_id) -> None:
        self.store.clear(user_id)
        logger.info("cart_cleared", user_id=str(user_id))

    def validate_cart(self, user_id) -> CartValidation:
        """Re-check every stored entry against the live catalogue.

        Entries whose product is gone or inactive are removed from the store.
        Stock shortfalls and price changes are reported but left in place.
        The price check compares against the price reported by the cart read
        that starts this call, so it is a point-in-time notice only.
        """
        quoted = {str(line.product.id): line.price for line in self.get_cart(user_id).items}
        errors = []

        for product_id, quantity in self.store.entries(user_id).items():
            product = find_product(product_id)
            if product is None:
                errors.append(f"Product {product_id} is no longer available")
                self.store.remove(user_id, product_id)
                continue

            if not product.is_active:
                errors.append(f"Product {product.name} is no longer available")
                self.store.remove(user_id, product_id)
                continue

            if quantity > product.stock:
                errors.append(
                    f"Only {product.stock} items of {product.name} available (you have {quantity} in cart)"
                )

            if product_id in quoted and product.price != quoted[product_id]:
                errors.append(f"Price of {product.name} has changed")

        if errors:
            logger.info("cart_validation_failed", user_id=str(user_id), issues=len(errors))

        return CartValidation(is_valid=not errors, errors=errors, cart=self.get_cart(user_id))
