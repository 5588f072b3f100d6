"""Address book management: commands and handler.

A user has at most one default address: marking one as default clears the
flag on the others inside the same unit of work.
"""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.address.address import Address, fetch_address
from storefront.shared.pagination import iterate


@storefront.command(part_of="Address")
class AddAddress:
    user_id = Identifier(required=True)
    street = String(sanitize=False, required=True, max_length=255)
    city = String(sanitize=False, required=True, max_length=100)
    state = String(sanitize=False, required=True, max_length=100)
    zip_code = String(sanitize=False, required=True, max_length=20)
    country = String(sanitize=False, required=True, max_length=100)
    is_default = Boolean(default=False)


@storefront.command(part_of="Address")
class UpdateAddress:
    address_id = Identifier(required=True)
    user_id = Identifier(required=True)
    street = String(sanitize=False, max_length=255)
    city = String(sanitize=False, max_length=100)
    state = String(sanitize=False, max_length=100)
    zip_code = String(sanitize=False, max_length=20)
    country = String(sanitize=False, max_length=100)
    is_default = Boolean()


@storefront.command(part_of="Address")
class RemoveAddress:
    address_id = Identifier(required=True)
    user_id = Identifier(required=True)


def _unset_defaults(user_id, keep=None):
    repo = current_domain.repository_for(Address)
    defaults = list(iterate(repo._dao.query.filter(user_id=str(user_id), is_default=True)))
    for address in defaults:
        if keep is not None and str(address.id) == str(keep):
            continue
        address.unset_default()
        repo.add(address)


@storefront.command_handler(part_of=Address)
class ManageAddressHandler:
    @handle(AddAddress)
    def add_address(self, command):
        if command.is_default:
            _unset_defaults(command.user_id)

        address = Address.register(
            user_id=command.user_id,
            street=command.street,
            city=command.city,
            state=command.state,
            zip_code=command.zip_code,
            country=command.country,
            is_default=command.is_default,
        )
        current_domain.repository_for(Address).add(address)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        address = fetch_address(command.address_id, user_id=command.user_id)

        if command.is_default:
            _unset_defaults(command.user_id, keep=address.id)

        address.update_details(
            street=command.street,
            city=command.city,
            state=command.state,
            zip_code=command.zip_code,
            country=command.country,
            is_default=command.is_default,
        )
        current_domain.repository_for(Address).add(address)

    @handle(RemoveAddress)
    def remove_address(self, command):
        address = fetch_address(command.address_id, user_id=command.user_id)
        current_domain.repository_for(Address)._dao.delete(address)
