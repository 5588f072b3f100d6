"""Category aggregate root for product categorization."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.errors import StorefrontError


@storefront.aggregate
class Category:
    """A grouping of products. Categories may nest under a parent category.

    The slug is unique across categories; the handlers check it before
    creating or renaming.
    """

    name: String(sanitize=False, required=True, max_length=100)
    slug: String(sanitize=False, required=True, max_length=120)
    description: Text(sanitize=False)
    parent_id: Identifier()
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, slug, description=None, parent_id=None):
        now = datetime.now(UTC)
        return cls(
            name=name,
            slug=slug,
            description=description,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )

    def update_details(self, name=None, slug=None, description=None, parent_id=None):
        if name is not None:
            self.name = name
        if slug is not None:
            self.slug = slug
        if description is not None:
            self.description = description
        if parent_id is not None:
            self.parent_id = parent_id
        self.updated_at = datetime.now(UTC)


def fetch_category(category_id, code="CATEGORY_NOT_FOUND", message="Category not found"):
    """Load a category or raise a 404 ``StorefrontError`` with ``code``."""
    try:
        return current_domain.repository_for(Category).get(category_id)
    except ObjectNotFoundError as exc:
        raise StorefrontError(message, 404, code) from exc
