"""Product aggregate root: price, stock and availability of a sellable item.

Stock is the one shared mutable counter in the system: checkout decrements it,
cancellation restores it, and admins may overwrite it. It never drops below
zero; ``reserve_stock`` refuses to go negative and the field itself carries a
``min_value`` of 0.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.errors import StorefrontError

LOW_STOCK_THRESHOLD = 10


@storefront.aggregate
class Product:
    name: String(sanitize=False, required=True, max_length=255)
    slug: String(sanitize=False, required=True, max_length=255)
    sku: String(sanitize=False, required=True, max_length=100)
    description: Text(sanitize=False, default="")
    price: Float(required=True, min_value=0.0)
    compare_price: Float(min_value=0.0)
    cost: Float(min_value=0.0)
    stock: Integer(default=0, min_value=0)
    is_active: Boolean(default=True)
    category_id: Identifier(required=True)
    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        slug,
        sku,
        price,
        category_id,
        description=None,
        compare_price=None,
        cost=None,
        stock=0,
        is_active=True,
    ):
        now = datetime.now(UTC)
        return cls(
            name=name,
            slug=slug,
            sku=sku,
            description=description or "",
            price=price,
            compare_price=compare_price,
            cost=cost,
            stock=stock or 0,
            is_active=True if is_active is None else is_active,
            category_id=category_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply the non-None entries of ``changes`` to the product."""
        for field_name, value in changes.items():
            if value is not None:
                setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def is_available(self, quantity):
        return bool(self.is_active) and quantity <= self.stock

    def reserve_stock(self, quantity):
        """Take ``quantity`` units out of stock for a placed order."""
        if quantity > self.stock:
            raise StorefrontError(
                f"Insufficient stock for {self.name}. Available: {self.stock}",
                400,
                "INSUFFICIENT_STOCK",
            )
        self.stock -= quantity
        self.updated_at = datetime.now(UTC)

    def restore_stock(self, quantity):
        """Put ``quantity`` units back, e.g. when an order is cancelled."""
        self.stock += quantity
        self.updated_at = datetime.now(UTC)


def fetch_product(product_id):
    """Load a product or raise ``PRODUCT_NOT_FOUND``."""
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError as exc:
        raise StorefrontError("Product not found", 404, "PRODUCT_NOT_FOUND") from exc


def find_product(product_id):
    """Load a product, or return None when it no longer exists."""
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        return None
