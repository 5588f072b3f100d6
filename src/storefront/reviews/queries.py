"""Read-side queries for reviews."""

from collections import Counter

from protean.utils.globals import current_domain

from storefront.catalogue.product.product import fetch_product
from storefront.reviews.review.review import MAX_RATING, MIN_RATING, Review, fetch_review
from storefront.shared.money import round_money
from storefront.shared.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, iterate, paginate


def list_reviews(product_id=None, user_id=None, page=DEFAULT_PAGE, limit=DEFAULT_LIMIT) -> Page:
    queryset = current_domain.repository_for(Review)._dao.query
    if product_id:
        queryset = queryset.filter(product_id=str(product_id))
    if user_id:
        queryset = queryset.filter(user_id=str(user_id))
    return paginate(queryset.order_by("-created_at"), page=page, limit=limit)


def get_review(review_id) -> Review:
    return fetch_review(review_id)


def rating_stats(product_id) -> dict:
    """Average rating, review count and the 1–5 star distribution for a product."""
    product = fetch_product(product_id)
    queryset = current_domain.repository_for(Review)._dao.query.filter(product_id=str(product.id))
    counts = Counter(review.rating for review in iterate(queryset))

    total = sum(counts.values())
    average = sum(rating * count for rating, count in counts.items()) / total if total else 0.0

    return {
        "product_id": str(product.id),
        "average_rating": round_money(average),
        "total_reviews": total,
        "distribution": [
            {
                "rating": rating,
                "count": counts.get(rating, 0),
                "percentage": round_money(counts.get(rating, 0) / total * 100) if total else 0.0,
            }
            for rating in range(MIN_RATING, MAX_RATING + 1)
        ],
    }
