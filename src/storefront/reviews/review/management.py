"""Review submission, editing and removal: commands and handler.

Only customers who bought a product may review it, and only once. A purchase
counts when one of the customer's orders containing the product has reached
Confirmed or any later non-cancelled status.
"""

from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import fetch_product
from storefront.domain import logger, storefront
from storefront.ordering.order.order import REVENUE_STATUSES, Order
from storefront.reviews.review.review import MAX_RATING, MIN_RATING, Review, fetch_review
from storefront.shared.errors import StorefrontError
from storefront.shared.pagination import iterate


@storefront.command(part_of="Review")
class SubmitReview:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True, min_value=MIN_RATING, max_value=MAX_RATING)
    comment = Text()


@storefront.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(min_value=MIN_RATING, max_value=MAX_RATING)
    comment = Text()


@storefront.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)


def has_purchased(user_id, product_id) -> bool:
    queryset = current_domain.repository_for(Order)._dao.query.filter(
        user_id=str(user_id),
        status__in=[status.value for status in REVENUE_STATUSES],
    )
    return any(
        str(item.product_id) == str(product_id)
        for order in iterate(queryset)
        for item in order.items
    )


@storefront.command_handler(part_of=Review)
class ManageReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        fetch_product(command.product_id)
        repo = current_domain.repository_for(Review)

        existing = repo._dao.query.filter(
            user_id=str(command.user_id),
            product_id=str(command.product_id),
        ).all()
        if existing.items:
            raise StorefrontError("You have already reviewed this product", 400, "REVIEW_EXISTS")

        if not has_purchased(command.user_id, command.product_id):
            raise StorefrontError("You can only review products you have purchased", 403, "PURCHASE_REQUIRED")

        review = Review.submit(
            user_id=command.user_id,
            product_id=command.product_id,
            rating=command.rating,
            comment=command.comment,
        )
        repo.add(review)
        logger.info("review_submitted", review_id=str(review.id), product_id=str(review.product_id))
        return str(review.id)

    @handle(EditReview)
    def edit_review(self, command):
        review = fetch_review(command.review_id)
        review.assert_written_by(command.user_id)
        review.edit(rating=command.rating, comment=command.comment)
        current_domain.repository_for(Review).add(review)

    @handle(DeleteReview)
    def delete_review(self, command):
        review = fetch_review(command.review_id)
        review.assert_written_by(command.user_id)
        current_domain.repository_for(Review)._dao.delete(review)
