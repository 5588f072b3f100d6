"""Read-side queries for user accounts and the address book."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront.catalogue.filters import Contains, Equals, SortBy, apply_filters
from storefront.identity.address.address import Address, fetch_address
from storefront.identity.user.user import User, fetch_user
from storefront.ordering.order.order import Order
from storefront.reviews.review.review import Review
from storefront.shared.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, iterate, paginate

USER_SEARCH_FIELDS = ("email", "first_name", "last_name")


@dataclass(frozen=True)
class UserDetail:
    user: User
    order_count: int
    review_count: int
    address_count: int


def _count_for(aggregate_cls, user_id) -> int:
    return current_domain.repository_for(aggregate_cls)._dao.query.filter(user_id=str(user_id)).limit(1).all().total


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def get_user_profile(user_id) -> User:
    return fetch_user(user_id)


def get_user(user_id) -> UserDetail:
    """A user together with how many orders, reviews and addresses they have."""
    user = fetch_user(user_id)
    return UserDetail(
        user=user,
        order_count=_count_for(Order, user.id),
        review_count=_count_for(Review, user.id),
        address_count=_count_for(Address, user.id),
    )


def list_users(page=DEFAULT_PAGE, limit=DEFAULT_LIMIT, search=None, role=None) -> Page:
    """Users newest first, optionally searched by email or name and narrowed to a role."""
    filters = []
    if search:
        filters.append(Contains(fields=USER_SEARCH_FIELDS, term=search))
    if role:
        filters.append(Equals(field="role", value=role))
    queryset = apply_filters(current_domain.repository_for(User)._dao.query, filters, SortBy.parse("-created_at"))
    return paginate(queryset, page=page, limit=limit)


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
def list_addresses(user_id) -> list[Address]:
    """All of a user's addresses, default first, then oldest first."""
    queryset = current_domain.repository_for(Address)._dao.query.filter(user_id=str(user_id))
    addresses = list(iterate(queryset.order_by("created_at")))
    return sorted(addresses, key=lambda address: not address.is_default)


def get_address(address_id, user_id) -> Address:
    return fetch_address(address_id, user_id=user_id)
