"""User account lifecycle: commands and handler.

Emails are unique across accounts (compared lowercased). Deleting a user
removes the account together with its addresses and reviews in one unit of
work; orders stay, since they are the shop's sales history.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.identity.address.address import Address
from storefront.identity.user.user import User, UserRole, fetch_user, normalize_email
from storefront.reviews.review.review import Review
from storefront.shared.errors import StorefrontError
from storefront.shared.pagination import iterate


@storefront.command(part_of="User")
class RegisterUser:
    """Create the account record for an authenticated user id."""

    user_id = Identifier(required=True)
    email = String(sanitize=False, required=True, max_length=254)
    first_name = String(sanitize=False, max_length=100)
    last_name = String(sanitize=False, max_length=100)


@storefront.command(part_of="User")
class UpdateProfile:
    user_id = Identifier(required=True)
    email = String(sanitize=False, max_length=254)
    first_name = String(sanitize=False, max_length=100)
    last_name = String(sanitize=False, max_length=100)


@storefront.command(part_of="User")
class ChangeUserRole:
    user_id = Identifier(required=True)
    role = String(required=True, choices=UserRole)


@storefront.command(part_of="User")
class DeleteUser:
    user_id = Identifier(required=True)


def _ensure_email_free(email, user_id=None):
    matches = current_domain.repository_for(User)._dao.query.filter(email=normalize_email(email)).all()
    if any(str(user.id) != str(user_id) for user in matches.items):
        raise StorefrontError("Email already in use", 400, "EMAIL_IN_USE")


def _delete_all(aggregate_cls, user_id):
    repo = current_domain.repository_for(aggregate_cls)
    records = list(iterate(repo._dao.query.filter(user_id=str(user_id))))
    for record in records:
        repo._dao.delete(record)
    return len(records)


@storefront.command_handler(part_of=User)
class ManageAccountHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        if repo._dao.query.filter(id=str(command.user_id)).all().total:
            raise StorefrontError("User already registered", 400, "USER_EXISTS")
        _ensure_email_free(command.email)

        user = User.register(
            user_id=command.user_id,
            email=command.email,
            first_name=command.first_name,
            last_name=command.last_name,
        )
        repo.add(user)
        logger.info("user_registered", user_id=str(user.id))
        return str(user.id)

    @handle(UpdateProfile)
    def update_profile(self, command):
        user = fetch_user(command.user_id)
        if command.email and normalize_email(command.email) != user.email:
            _ensure_email_free(command.email, user_id=user.id)

        user.update_profile(
            email=command.email,
            first_name=command.first_name,
            last_name=command.last_name,
        )
        current_domain.repository_for(User).add(user)

    @handle(ChangeUserRole)
    def change_user_role(self, command):
        user = fetch_user(command.user_id)
        user.change_role(command.role)
        current_domain.repository_for(User).add(user)
        logger.info("user_role_changed", user_id=str(user.id), role=user.role)

    @handle(DeleteUser)
    def delete_user(self, command):
        user = fetch_user(command.user_id)
        addresses = _delete_all(Address, user.id)
        reviews = _delete_all(Review, user.id)
        current_domain.repository_for(User)._dao.delete(user)
        logger.info("user_deleted", user_id=str(user.id), addresses=addresses, reviews=reviews)
