"""Read-side queries for the catalogue: product listing, product detail, categories."""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category, fetch_category
from storefront.catalogue.filters import SortBy, apply_filters, product_filters
from storefront.catalogue.product.product import Product, fetch_product
from storefront.reviews.review.review import Review
from storefront.shared.money import round_money
from storefront.shared.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, iterate, paginate

RECENT_REVIEWS = 10


@dataclass(frozen=True)
class ProductDetail:
    product: Product
    category: Category | None
    average_rating: float
    review_count: int
    recent_reviews: list = field(default_factory=list)


@dataclass(frozen=True)
class CategorySummary:
    category: Category
    parent: Category | None
    children: list = field(default_factory=list)
    product_count: int = 0


def list_products(
    page=DEFAULT_PAGE,
    limit=DEFAULT_LIMIT,
    search=None,
    category=None,
    min_price=None,
    max_price=None,
    sort=None,
    is_active=None,
) -> Page:
    filters = product_filters(
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        is_active=is_active,
    )
    queryset = apply_filters(
        current_domain.repository_for(Product)._dao.query,
        filters,
        SortBy.parse(sort),
    )
    return paginate(queryset, page=page, limit=limit)


def get_product(product_id) -> ProductDetail:
    product = fetch_product(product_id)

    reviews = list(
        iterate(current_domain.repository_for(Review)._dao.query.filter(product_id=str(product.id)).order_by("-created_at"))
    )
    average = sum(review.rating for review in reviews) / len(reviews) if reviews else 0.0

    return ProductDetail(
        product=product,
        category=_find_category(product.category_id),
        average_rating=round_money(average),
        review_count=len(reviews),
        recent_reviews=reviews[:RECENT_REVIEWS],
    )


def _find_category(category_id):
    if not category_id:
        return None
    result = current_domain.repository_for(Category)._dao.query.filter(id=str(category_id)).all()
    return result.items[0] if result.items else None


def _summarize(category) -> CategorySummary:
    repo = current_domain.repository_for(Category)
    children = list(iterate(repo._dao.query.filter(parent_id=str(category.id)).order_by("name")))
    products = current_domain.repository_for(Product)._dao.query.filter(category_id=str(category.id)).all()
    return CategorySummary(
        category=category,
        parent=_find_category(category.parent_id),
        children=children,
        product_count=products.total,
    )


def list_categories() -> list[CategorySummary]:
    queryset = current_domain.repository_for(Category)._dao.query.order_by("-created_at")
    return [_summarize(category) for category in iterate(queryset)]


def get_category(category_id) -> CategorySummary:
    return _summarize(fetch_category(category_id))
