"""Product management: create, update and delete commands with their handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import fetch_category
from storefront.catalogue.product.product import Product, fetch_product
from storefront.domain import logger, storefront
from storefront.ordering.order.order import OrderItem
from storefront.shared.errors import StorefrontError

DELETED = "deleted"
DEACTIVATED = "deactivated"


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(sanitize=False, required=True, max_length=255)
    slug: String(sanitize=False, required=True, max_length=255)
    sku: String(sanitize=False, required=True, max_length=100)
    description: Text(sanitize=False)
    price: Float(required=True, min_value=0.0)
    compare_price: Float(min_value=0.0)
    cost: Float(min_value=0.0)
    category_id: Identifier(required=True)
    stock: Integer(min_value=0)
    is_active: Boolean()


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    name: String(sanitize=False, max_length=255)
    slug: String(sanitize=False, max_length=255)
    sku: String(sanitize=False, max_length=100)
    description: Text(sanitize=False)
    price: Float(min_value=0.0)
    compare_price: Float(min_value=0.0)
    cost: Float(min_value=0.0)
    category_id: Identifier()
    stock: Integer(min_value=0)
    is_active: Boolean()


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


def _taken(field_name, value):
    existing = current_domain.repository_for(Product)._dao.query.filter(**{field_name: value}).all()
    return bool(existing.items)


def _ensure_unique_slug(slug):
    if _taken("slug", slug):
        raise StorefrontError("Product with this slug already exists", 400, "SLUG_EXISTS")


def _ensure_unique_sku(sku):
    if _taken("sku", sku):
        raise StorefrontError("Product with this SKU already exists", 400, "SKU_EXISTS")


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        _ensure_unique_slug(command.slug)
        _ensure_unique_sku(command.sku)
        fetch_category(command.category_id)

        product = Product.create(
            name=command.name,
            slug=command.slug,
            sku=command.sku,
            description=command.description,
            price=command.price,
            compare_price=command.compare_price,
            cost=command.cost,
            category_id=command.category_id,
            stock=command.stock,
            is_active=command.is_active,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_created", product_id=str(product.id), sku=product.sku)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        product = fetch_product(command.product_id)

        if command.slug and command.slug != product.slug:
            _ensure_unique_slug(command.slug)
        if command.sku and command.sku != product.sku:
            _ensure_unique_sku(command.sku)
        if command.category_id:
            fetch_category(command.category_id)

        product.update_details(
            name=command.name,
            slug=command.slug,
            sku=command.sku,
            description=command.description,
            price=command.price,
            compare_price=command.compare_price,
            cost=command.cost,
            category_id=command.category_id,
            stock=command.stock,
            is_active=command.is_active,
        )
        current_domain.repository_for(Product).add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        """Delete a product, or deactivate it when orders reference it.

        Order items snapshot the product id, so a product that has been sold
        stays in the table (inactive) to keep order history resolvable.
        """
        repo = current_domain.repository_for(Product)
        product = fetch_product(command.product_id)

        ordered = current_domain.repository_for(OrderItem)._dao.query.filter(product_id=str(product.id)).all()
        if ordered.total > 0:
            product.deactivate()
            repo.add(product)
            logger.info("product_deactivated", product_id=str(product.id))
            return DEACTIVATED

        repo._dao.delete(product)
        logger.info("product_deleted", product_id=str(product.id))
        return DELETED
