"""Pydantic request/response schemas for the user account and address book APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class AddAddressRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "street": "123 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "zip_code": "62701",
                    "country": "US",
                    "is_default": True,
                }
            ]
        }
    }

    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    is_default: bool = False


class UpdateAddressRequest(BaseModel):
    street: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=100)
    state: str | None = Field(None, min_length=1, max_length=100)
    zip_code: str | None = Field(None, min_length=1, max_length=20)
    country: str | None = Field(None, min_length=1, max_length=100)
    is_default: bool | None = None


class AddressResponse(BaseModel):
    id: str
    user_id: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    is_default: bool

    @classmethod
    def from_address(cls, address) -> AddressResponse:
        return cls(
            id=str(address.id),
            user_id=str(address.user_id),
            street=address.street,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            country=address.country,
            is_default=address.is_default,
        )


class RegisterProfileRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"email": "jane@example.com", "first_name": "Jane", "last_name": "Doe"}]
        }
    }

    email: str = Field(..., min_length=3, max_length=254)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)


class UpdateProfileRequest(BaseModel):
    email: str | None = Field(None, min_length=3, max_length=254)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)


class ChangeRoleRequest(BaseModel):
    role: Literal["CUSTOMER", "ADMIN"]


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_user(cls, user) -> UserResponse:
        return cls(
            id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserDetailResponse(UserResponse):
    order_count: int = 0
    review_count: int = 0
    address_count: int = 0

    @classmethod
    def from_detail(cls, detail) -> UserDetailResponse:
        return cls(
            **UserResponse.from_user(detail.user).model_dump(),
            order_count=detail.order_count,
            review_count=detail.review_count,
            address_count=detail.address_count,
        )
