"""User aggregate: the account record behind an externally authenticated user id.

Authentication happens upstream, so the aggregate's identity is the id the
gateway asserts in ``X-User-Id``. Addresses, carts, orders and reviews all
refer to users by that same id.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.errors import StorefrontError


class UserRole(Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


def normalize_email(email):
    return email.strip().lower() if email else email


@storefront.aggregate
class User:
    email = String(sanitize=False, required=True, max_length=254)
    first_name = String(sanitize=False, max_length=100)
    last_name = String(sanitize=False, max_length=100)
    role = String(choices=UserRole, default=UserRole.CUSTOMER.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def email_must_look_like_an_address(self):
        email = self.email or ""
        local_part, _, domain_part = email.partition("@")
        if not local_part or "." not in domain_part or " " in email or email.count("@") != 1:
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

    @classmethod
    def register(cls, user_id, email, first_name=None, last_name=None, role=UserRole.CUSTOMER.value):
        now = datetime.now(UTC)
        return cls(
            id=user_id,
            email=normalize_email(email),
            first_name=first_name,
            last_name=last_name,
            role=role,
            created_at=now,
            updated_at=now,
        )

    def update_profile(self, email=None, first_name=None, last_name=None):
        if email is not None:
            self.email = normalize_email(email)
        if first_name is not None:
            self.first_name = first_name
        if last_name is not None:
            self.last_name = last_name
        self.updated_at = datetime.now(UTC)

    def change_role(self, role):
        self.role = UserRole(role).value
        self.updated_at = datetime.now(UTC)


def fetch_user(user_id):
    """Load a user or raise ``USER_NOT_FOUND``."""
    try:
        return current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError as exc:
        raise StorefrontError("User not found", 404, "USER_NOT_FOUND") from exc
