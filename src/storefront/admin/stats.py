"""Admin analytics over the catalogue and order history.

Read models are plain dicts assembled by scanning repositories in batches.
"""

from collections import Counter, defaultdict
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.product import LOW_STOCK_THRESHOLD, Product, find_product
from storefront.identity.user.user import User, UserRole
from storefront.ordering.order.order import REVENUE_STATUSES, Order
from storefront.shared.money import round_money
from storefront.shared.pagination import iterate

TOP_N = 10
GROWTH_MONTHS = 6


class SalesPeriod(Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


_PERIOD_DAYS = {
    SalesPeriod.WEEK: 7,
    SalesPeriod.MONTH: 30,
    SalesPeriod.YEAR: 365,
}

_REVENUE_VALUES = [status.value for status in REVENUE_STATUSES]


def _count(queryset) -> int:
    return queryset.limit(1).all().total


def _as_utc(moment):
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def _order_row(order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "user_id": str(order.user_id),
        "status": order.status,
        "total": order.total,
        "created_at": order.created_at,
    }


def _product_row(product) -> dict:
    return {
        "id": str(product.id),
        "name": product.name,
        "sku": product.sku,
        "price": product.price,
        "stock": product.stock,
    }


def _top_selling():
    quantities = Counter()
    revenue = defaultdict(float)
    for order in iterate(current_domain.repository_for(Order)._dao.query):
        for item in order.items:
            product_id = str(item.product_id)
            quantities[product_id] += item.quantity
            revenue[product_id] += item.total

    top = []
    for product_id, quantity in quantities.most_common(TOP_N):
        product = find_product(product_id)
        top.append(
            {
                "product": _product_row(product) if product else {"id": product_id},
                "total_quantity": quantity,
                "total_revenue": round_money(revenue[product_id]),
            }
        )
    return top


def dashboard_stats() -> dict:
    product_dao = current_domain.repository_for(Product)._dao
    order_dao = current_domain.repository_for(Order)._dao

    revenue_orders = iterate(order_dao.query.filter(status__in=_REVENUE_VALUES))
    total_revenue = round_money(sum(order.total for order in revenue_orders))

    recent = order_dao.query.order_by("-created_at").limit(TOP_N).all().items
    low_stock = (
        product_dao.query.filter(is_active=True, stock__lt=LOW_STOCK_THRESHOLD)
        .order_by("stock")
        .limit(TOP_N)
        .all()
        .items
    )

    return {
        "overview": {
            "total_users": _count(current_domain.repository_for(User)._dao.query),
            "total_products": _count(product_dao.query.filter(is_active=True)),
            "total_orders": _count(order_dao.query),
            "total_revenue": total_revenue,
        },
        "recent_orders": [_order_row(order) for order in recent],
        "low_stock_products": [_product_row(product) for product in low_stock],
        "top_selling_products": _top_selling(),
    }


def sales_stats(period=SalesPeriod.MONTH.value, now=None) -> dict:
    """Revenue orders in a rolling window ending now, bucketed per day."""
    period = SalesPeriod(period)
    end = now or datetime.now(UTC)
    start = end - timedelta(days=_PERIOD_DAYS[period])

    queryset = current_domain.repository_for(Order)._dao.query.filter(status__in=_REVENUE_VALUES)
    orders = [order for order in iterate(queryset) if _as_utc(order.created_at) >= start]

    per_day = defaultdict(lambda: {"revenue": 0.0, "orders": 0})
    for order in orders:
        bucket = per_day[_as_utc(order.created_at).date().isoformat()]
        bucket["revenue"] += order.total
        bucket["orders"] += 1

    total_revenue = round_money(sum(order.total for order in orders))
    return {
        "period": period.value,
        "start_date": start,
        "end_date": end,
        "summary": {
            "total_revenue": total_revenue,
            "total_orders": len(orders),
            "average_order_value": round_money(total_revenue / len(orders)) if orders else 0.0,
        },
        "chart_data": [
            {"date": day, "revenue": round_money(data["revenue"]), "orders": data["orders"]}
            for day, data in sorted(per_day.items())
        ],
        "status_breakdown": dict(Counter(order.status for order in orders)),
    }


def product_stats() -> dict:
    product_dao = current_domain.repository_for(Product)._dao

    categories = []
    for category in iterate(current_domain.repository_for(Category)._dao.query):
        categories.append(
            {
                "id": str(category.id),
                "name": category.name,
                "product_count": _count(product_dao.query.filter(category_id=str(category.id))),
            }
        )
    categories.sort(key=lambda row: row["product_count"], reverse=True)

    return {
        "summary": {
            "total_products": _count(product_dao.query),
            "active_products": _count(product_dao.query.filter(is_active=True)),
            "out_of_stock_count": _count(product_dao.query.filter(stock=0)),
        },
        "categories": categories,
    }


def _months_back(moment, months):
    """First day of the month ``months`` before ``moment``'s month."""
    index = moment.year * 12 + moment.month - 1 - months
    return moment.replace(year=index // 12, month=index % 12 + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


def user_stats(now=None) -> dict:
    """Account counts, the newest users and sign-ups per month over the last six months."""
    user_dao = current_domain.repository_for(User)._dao
    order_dao = current_domain.repository_for(Order)._dao
    since = _months_back(now or datetime.now(UTC), GROWTH_MONTHS)

    recent = user_dao.query.order_by("-created_at").limit(TOP_N).all().items
    growth = Counter(
        _as_utc(user.created_at).strftime("%Y-%m")
        for user in iterate(user_dao.query)
        if user.created_at is not None and _as_utc(user.created_at) >= since
    )

    return {
        "summary": {
            "total_users": _count(user_dao.query),
            "customer_count": _count(user_dao.query.filter(role=UserRole.CUSTOMER.value)),
            "admin_count": _count(user_dao.query.filter(role=UserRole.ADMIN.value)),
        },
        "recent_users": [
            {
                "id": str(user.id),
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "role": user.role,
                "created_at": user.created_at,
                "order_count": _count(order_dao.query.filter(user_id=str(user.id))),
            }
            for user in recent
        ],
        "growth_data": [{"month": month, "count": count} for month, count in sorted(growth.items())],
    }
