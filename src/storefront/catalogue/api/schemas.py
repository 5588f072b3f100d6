"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Product Request Schemas ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Classic Black T-Shirt",
                    "slug": "classic-black-tshirt",
                    "sku": "TSHIRT-BLK-M",
                    "description": "Premium cotton crew-neck tee in black.",
                    "price": 19.99,
                    "compare_price": 24.99,
                    "category_id": "cat-apparel-001",
                    "stock": 120,
                }
            ]
        }
    }

    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    sku: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    price: float = Field(..., ge=0)
    compare_price: float | None = Field(None, ge=0)
    cost: float | None = Field(None, ge=0)
    category_id: str
    stock: int = Field(0, ge=0)
    is_active: bool = True


class UpdateProductRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255)
    sku: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    price: float | None = Field(None, ge=0)
    compare_price: float | None = Field(None, ge=0)
    cost: float | None = Field(None, ge=0)
    category_id: str | None = None
    stock: int | None = Field(None, ge=0)
    is_active: bool | None = None


# --- Category Request Schemas ---


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    parent_id: str | None = None


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    parent_id: str | None = None


# --- Response Schemas ---


class CategoryRef(BaseModel):
    id: str
    name: str
    slug: str

    @classmethod
    def from_category(cls, category) -> CategoryRef:
        return cls(id=str(category.id), name=category.name, slug=category.slug)


class ProductResponse(BaseModel):
    id: str
    name: str
    slug: str
    sku: str
    description: str | None = None
    price: float
    compare_price: float | None = None
    stock: int
    is_active: bool
    category_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product) -> ProductResponse:
        return cls(
            id=str(product.id),
            name=product.name,
            slug=product.slug,
            sku=product.sku,
            description=product.description,
            price=product.price,
            compare_price=product.compare_price,
            stock=product.stock,
            is_active=product.is_active,
            category_id=str(product.category_id),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ReviewSnippet(BaseModel):
    id: str
    user_id: str
    rating: int
    comment: str | None = None
    created_at: datetime | None = None


class ProductDetailResponse(ProductResponse):
    category: CategoryRef | None = None
    average_rating: float = 0.0
    review_count: int = 0
    reviews: list[ReviewSnippet] = Field(default_factory=list)

    @classmethod
    def from_detail(cls, detail) -> ProductDetailResponse:
        base = ProductResponse.from_product(detail.product).model_dump()
        return cls(
            **base,
            category=CategoryRef.from_category(detail.category) if detail.category else None,
            average_rating=detail.average_rating,
            review_count=detail.review_count,
            reviews=[
                ReviewSnippet(
                    id=str(review.id),
                    user_id=str(review.user_id),
                    rating=review.rating,
                    comment=review.comment,
                    created_at=review.created_at,
                )
                for review in detail.recent_reviews
            ],
        )


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    parent: CategoryRef | None = None
    children: list[CategoryRef] = Field(default_factory=list)
    product_count: int = 0

    @classmethod
    def from_summary(cls, summary) -> CategoryResponse:
        category = summary.category
        return cls(
            id=str(category.id),
            name=category.name,
            slug=category.slug,
            description=category.description,
            parent=CategoryRef.from_category(summary.parent) if summary.parent else None,
            children=[CategoryRef.from_category(child) for child in summary.children],
            product_count=summary.product_count,
        )
