"""FastAPI endpoints for admin analytics. Every route requires the ADMIN role."""

from fastapi import APIRouter, Depends

from storefront.admin import stats
from storefront.admin.stats import SalesPeriod
from storefront.shared.api import admin_principal, ok

admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(admin_principal)])


@admin_router.get("/dashboard")
async def dashboard() -> dict:
    return ok(stats.dashboard_stats())


@admin_router.get("/sales-stats")
async def sales_stats(period: SalesPeriod = SalesPeriod.MONTH) -> dict:
    return ok(stats.sales_stats(period.value))


@admin_router.get("/product-stats")
async def product_stats() -> dict:
    return ok(stats.product_stats())


@admin_router.get("/user-stats")
async def user_stats() -> dict:
    return ok(stats.user_stats())
