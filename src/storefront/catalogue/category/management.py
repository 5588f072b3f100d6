"""Category management: commands and handler."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category, fetch_category
from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.shared.errors import StorefrontError


@storefront.command(part_of="Category")
class CreateCategory:
    name: String(sanitize=False, required=True, max_length=100)
    slug: String(sanitize=False, required=True, max_length=120)
    description: Text(sanitize=False)
    parent_id: Identifier()


@storefront.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(sanitize=False, max_length=100)
    slug: String(sanitize=False, max_length=120)
    description: Text(sanitize=False)
    parent_id: Identifier()


@storefront.command(part_of="Category")
class DeleteCategory:
    category_id: Identifier(required=True)


def _slug_taken(slug):
    existing = current_domain.repository_for(Category)._dao.query.filter(slug=slug).all()
    return bool(existing.items)


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        if _slug_taken(command.slug):
            raise StorefrontError("Category with this slug already exists", 400, "SLUG_EXISTS")

        if command.parent_id:
            fetch_category(command.parent_id, code="PARENT_NOT_FOUND", message="Parent category not found")

        category = Category.create(
            name=command.name,
            slug=command.slug,
            description=command.description,
            parent_id=command.parent_id,
        )
        current_domain.repository_for(Category).add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = fetch_category(command.category_id)

        if command.slug and command.slug != category.slug and _slug_taken(command.slug):
            raise StorefrontError("Category with this slug already exists", 400, "SLUG_EXISTS")

        if command.parent_id:
            if str(command.parent_id) == str(category.id):
                raise StorefrontError("Category cannot be its own parent", 400, "INVALID_PARENT")
            fetch_category(command.parent_id, code="PARENT_NOT_FOUND", message="Parent category not found")

        category.update_details(
            name=command.name,
            slug=command.slug,
            description=command.description,
            parent_id=command.parent_id,
        )
        repo.add(category)

    @handle(DeleteCategory)
    def delete_category(self, command):
        repo = current_domain.repository_for(Category)
        category = fetch_category(command.category_id)

        products = current_domain.repository_for(Product)._dao.query.filter(category_id=str(category.id)).all()
        if products.total > 0:
            raise StorefrontError(
                "Cannot delete category with products. Please reassign or delete products first.",
                400,
                "CATEGORY_HAS_PRODUCTS",
            )

        children = repo._dao.query.filter(parent_id=str(category.id)).all()
        if children.total > 0:
            raise StorefrontError(
                "Cannot delete category with subcategories. Please delete subcategories first.",
                400,
                "CATEGORY_HAS_CHILDREN",
            )

        repo._dao.delete(category)
