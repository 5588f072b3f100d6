"""Review aggregate: one customer's rating of one product."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.errors import StorefrontError, forbidden

MIN_RATING = 1
MAX_RATING = 5


@storefront.aggregate
class Review:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True, min_value=MIN_RATING, max_value=MAX_RATING)
    comment = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def submit(cls, user_id, product_id, rating, comment=None):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            product_id=product_id,
            rating=rating,
            comment=comment,
            created_at=now,
            updated_at=now,
        )

    def edit(self, rating=None, comment=None):
        if rating is not None:
            self.rating = rating
        if comment is not None:
            self.comment = comment
        self.updated_at = datetime.now(UTC)

    def assert_written_by(self, user_id):
        if str(self.user_id) != str(user_id):
            raise forbidden()


def fetch_review(review_id):
    try:
        return current_domain.repository_for(Review).get(review_id)
    except ObjectNotFoundError as exc:
        raise StorefrontError("Review not found", 404, "REVIEW_NOT_FOUND") from exc
