"""FastAPI endpoints for product reviews."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.reviews import queries
from storefront.reviews.api.schemas import EditReviewRequest, ReviewResponse, SubmitReviewRequest
from storefront.reviews.review.management import DeleteReview, EditReview, SubmitReview
from storefront.shared.api import Principal, current_principal, ok

review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.get("")
async def list_reviews(
    product_id: str | None = None,
    user_id: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict:
    result = queries.list_reviews(product_id=product_id, user_id=user_id, page=page, limit=limit)
    return ok(
        {
            "reviews": [ReviewResponse.from_review(review) for review in result.items],
            "pagination": result.meta(),
        }
    )


@review_router.get("/stats/{product_id}")
async def rating_stats(product_id: str) -> dict:
    return ok(queries.rating_stats(product_id))


@review_router.get("/{review_id}")
async def get_review(review_id: str) -> dict:
    return ok(ReviewResponse.from_review(queries.get_review(review_id)))


@review_router.post("", status_code=201)
async def submit_review(body: SubmitReviewRequest, principal: Principal = Depends(current_principal)) -> dict:
    command = SubmitReview(user_id=principal.user_id, **body.model_dump())
    review_id = current_domain.process(command, asynchronous=False)
    return ok(ReviewResponse.from_review(queries.get_review(review_id)), "Review created successfully")


@review_router.put("/{review_id}")
async def edit_review(
    review_id: str,
    body: EditReviewRequest,
    principal: Principal = Depends(current_principal),
) -> dict:
    command = EditReview(review_id=review_id, user_id=principal.user_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(ReviewResponse.from_review(queries.get_review(review_id)), "Review updated successfully")


@review_router.delete("/{review_id}")
async def delete_review(review_id: str, principal: Principal = Depends(current_principal)) -> dict:
    current_domain.process(DeleteReview(review_id=review_id, user_id=principal.user_id), asynchronous=False)
    return ok(message="Review deleted successfully")
