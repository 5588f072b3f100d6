"""Address aggregate: a shipping address owned by exactly one user."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.errors import StorefrontError, forbidden


@storefront.aggregate
class Address:
    user_id = Identifier(required=True)
    street = String(sanitize=False, required=True, max_length=255)
    city = String(sanitize=False, required=True, max_length=100)
    state = String(sanitize=False, required=True, max_length=100)
    zip_code = String(sanitize=False, required=True, max_length=20)
    country = String(sanitize=False, required=True, max_length=100)
    is_default = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, user_id, street, city, state, zip_code, country, is_default=False):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            street=street,
            city=city,
            state=state,
            zip_code=zip_code,
            country=country,
            is_default=bool(is_default),
            created_at=now,
            updated_at=now,
        )

    def update_details(self, **changes):
        for field_name, value in changes.items():
            if value is not None:
                setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)

    def unset_default(self):
        self.is_default = False
        self.updated_at = datetime.now(UTC)

    def assert_owned_by(self, user_id):
        if str(self.user_id) != str(user_id):
            raise forbidden()


def fetch_address(address_id, user_id=None, message="Address not found"):
    """Load an address or raise ``ADDRESS_NOT_FOUND``; check ownership when ``user_id`` is given."""
    try:
        address = current_domain.repository_for(Address).get(address_id)
    except ObjectNotFoundError as exc:
        raise StorefrontError(message, 404, "ADDRESS_NOT_FOUND") from exc

    if user_id is not None:
        address.assert_owned_by(user_id)
    return address
