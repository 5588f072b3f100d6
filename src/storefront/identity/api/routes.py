"""FastAPI endpoints for user accounts and the caller's address book."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.identity import queries
from storefront.identity.address.management import AddAddress, RemoveAddress, UpdateAddress
from storefront.identity.api.schemas import (
    AddAddressRequest,
    AddressResponse,
    ChangeRoleRequest,
    RegisterProfileRequest,
    UpdateAddressRequest,
    UpdateProfileRequest,
    UserDetailResponse,
    UserResponse,
)
from storefront.identity.user.account import ChangeUserRole, DeleteUser, RegisterUser, UpdateProfile
from storefront.identity.user.user import UserRole
from storefront.ordering.cart.service import CartService
from storefront.shared.api import Principal, admin_principal, current_principal, get_cart_service, ok

address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.post("", status_code=201)
async def add_address(body: AddAddressRequest, principal: Principal = Depends(current_principal)) -> dict:
    command = AddAddress(user_id=principal.user_id, **body.model_dump())
    address_id = current_domain.process(command, asynchronous=False)
    address = queries.get_address(address_id, principal.user_id)
    return ok(AddressResponse.from_address(address), "Address created successfully")


@address_router.get("")
async def list_addresses(principal: Principal = Depends(current_principal)) -> dict:
    return ok([AddressResponse.from_address(address) for address in queries.list_addresses(principal.user_id)])


@address_router.get("/{address_id}")
async def get_address(address_id: str, principal: Principal = Depends(current_principal)) -> dict:
    return ok(AddressResponse.from_address(queries.get_address(address_id, principal.user_id)))


@address_router.put("/{address_id}")
async def update_address(
    address_id: str,
    body: UpdateAddressRequest,
    principal: Principal = Depends(current_principal),
) -> dict:
    command = UpdateAddress(
        address_id=address_id,
        user_id=principal.user_id,
        **body.model_dump(exclude_none=True),
    )
    current_domain.process(command, asynchronous=False)
    address = queries.get_address(address_id, principal.user_id)
    return ok(AddressResponse.from_address(address), "Address updated successfully")


@address_router.delete("/{address_id}")
async def remove_address(address_id: str, principal: Principal = Depends(current_principal)) -> dict:
    current_domain.process(RemoveAddress(address_id=address_id, user_id=principal.user_id), asynchronous=False)
    return ok(message="Address deleted successfully")


user_router = APIRouter(prefix="/users", tags=["users"])


# ---------------------------------------------------------------------------
# The caller's own account
# ---------------------------------------------------------------------------
@user_router.post("/profile", status_code=201)
async def register_profile(body: RegisterProfileRequest, principal: Principal = Depends(current_principal)) -> dict:
    current_domain.process(RegisterUser(user_id=principal.user_id, **body.model_dump()), asynchronous=False)
    return ok(UserResponse.from_user(queries.get_user_profile(principal.user_id)), "Profile created successfully")


@user_router.get("/profile")
async def get_profile(principal: Principal = Depends(current_principal)) -> dict:
    return ok(UserResponse.from_user(queries.get_user_profile(principal.user_id)))


@user_router.put("/profile")
async def update_profile(body: UpdateProfileRequest, principal: Principal = Depends(current_principal)) -> dict:
    command = UpdateProfile(user_id=principal.user_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(UserResponse.from_user(queries.get_user_profile(principal.user_id)), "Profile updated successfully")


# ---------------------------------------------------------------------------
# Admin user management
# ---------------------------------------------------------------------------
@user_router.get("", dependencies=[Depends(admin_principal)])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = None,
    role: UserRole | None = None,
) -> dict:
    result = queries.list_users(page=page, limit=limit, search=search, role=role.value if role else None)
    return ok(
        {
            "users": [UserResponse.from_user(user) for user in result.items],
            "pagination": result.meta(),
        }
    )


@user_router.get("/{user_id}", dependencies=[Depends(admin_principal)])
async def get_user(user_id: str) -> dict:
    return ok(UserDetailResponse.from_detail(queries.get_user(user_id)))


@user_router.patch("/{user_id}/role", dependencies=[Depends(admin_principal)])
async def change_user_role(user_id: str, body: ChangeRoleRequest) -> dict:
    current_domain.process(ChangeUserRole(user_id=user_id, role=body.role), asynchronous=False)
    return ok(UserResponse.from_user(queries.get_user_profile(user_id)), "User role updated successfully")


@user_router.delete("/{user_id}", dependencies=[Depends(admin_principal)])
async def delete_user(user_id: str, carts: CartService = Depends(get_cart_service)) -> dict:
    current_domain.process(DeleteUser(user_id=user_id), asynchronous=False)
    carts.clear_cart(user_id)
    return ok(message="User deleted successfully")
