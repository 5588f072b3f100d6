"""FastAPI endpoints for the Catalogue: products and categories."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.catalogue import queries
from storefront.catalogue.api.schemas import (
    CategoryResponse,
    CreateCategoryRequest,
    CreateProductRequest,
    ProductDetailResponse,
    ProductResponse,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from storefront.catalogue.category.management import CreateCategory, DeleteCategory, UpdateCategory
from storefront.catalogue.product.management import DEACTIVATED, CreateProduct, DeleteProduct, UpdateProduct
from storefront.catalogue.product.product import fetch_product
from storefront.shared.api import admin_principal, ok

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])


# --- Product endpoints ---


@product_router.get("")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = None,
    category: str | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    sort: str | None = None,
    is_active: bool | None = None,
) -> dict:
    result = queries.list_products(
        page=page,
        limit=limit,
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        is_active=is_active,
    )
    return ok(
        {
            "products": [ProductResponse.from_product(product) for product in result.items],
            "pagination": result.meta(),
        }
    )


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    return ok(ProductDetailResponse.from_detail(queries.get_product(product_id)))


@product_router.post("", status_code=201, dependencies=[Depends(admin_principal)])
async def create_product(body: CreateProductRequest) -> dict:
    command = CreateProduct(**body.model_dump())
    product_id = current_domain.process(command, asynchronous=False)
    return ok(ProductResponse.from_product(fetch_product(product_id)), "Product created successfully")


@product_router.put("/{product_id}", dependencies=[Depends(admin_principal)])
async def update_product(product_id: str, body: UpdateProductRequest) -> dict:
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(ProductResponse.from_product(fetch_product(product_id)), "Product updated successfully")


@product_router.delete("/{product_id}", dependencies=[Depends(admin_principal)])
async def delete_product(product_id: str) -> dict:
    outcome = current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    if outcome == DEACTIVATED:
        return ok(message="Product has existing orders and has been deactivated instead of deleted")
    return ok(message="Product deleted successfully")


# --- Category endpoints ---


@category_router.get("")
async def list_categories() -> dict:
    return ok([CategoryResponse.from_summary(summary) for summary in queries.list_categories()])


@category_router.get("/{category_id}")
async def get_category(category_id: str) -> dict:
    return ok(CategoryResponse.from_summary(queries.get_category(category_id)))


@category_router.post("", status_code=201, dependencies=[Depends(admin_principal)])
async def create_category(body: CreateCategoryRequest) -> dict:
    category_id = current_domain.process(CreateCategory(**body.model_dump()), asynchronous=False)
    return ok(CategoryResponse.from_summary(queries.get_category(category_id)), "Category created successfully")


@category_router.put("/{category_id}", dependencies=[Depends(admin_principal)])
async def update_category(category_id: str, body: UpdateCategoryRequest) -> dict:
    command = UpdateCategory(category_id=category_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(CategoryResponse.from_summary(queries.get_category(category_id)), "Category updated successfully")


@category_router.delete("/{category_id}", dependencies=[Depends(admin_principal)])
async def delete_category(category_id: str) -> dict:
    current_domain.process(DeleteCategory(category_id=category_id), asynchronous=False)
    return ok(message="Category deleted successfully")
