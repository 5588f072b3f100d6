"""Shared FastAPI plumbing: response envelope, caller identity, services, error mapping.

Every response has the shape ``{success, message?, data?, error?}``. Identity
is asserted by the upstream gateway through the ``X-User-Id`` and
``X-User-Role`` headers and trusted as-is.
"""

import uuid
from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from storefront.ordering.cart.service import CartService
from storefront.ordering.cart.store import CartStore
from storefront.ordering.service import OrderService
from storefront.shared.errors import StorefrontError, forbidden
from storefront.utils.logging import add_context, clear_context, get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------
def ok(data=None, message: str | None = None) -> dict:
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return body


def _error_response(error: StorefrontError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": jsonable_encoder(error.to_dict())},
    )


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------
class Role(Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def scope(self) -> str | None:
        """User id to restrict access to, or None for admins."""
        return None if self.is_admin else self.user_id


def current_principal(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Principal:
    if not x_user_id:
        raise StorefrontError("Authentication required", 401, "UNAUTHORIZED")
    try:
        role = Role((x_user_role or Role.CUSTOMER.value).upper())
    except ValueError as exc:
        raise StorefrontError("Unknown role", 401, "UNAUTHORIZED") from exc
    return Principal(user_id=x_user_id, role=role)


def admin_principal(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_admin:
        raise forbidden("Admin access required")
    return principal


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------
def bind_services(app: FastAPI, cart_store: CartStore) -> None:
    """Construct the services around ``cart_store`` and attach them to ``app``."""
    cart_service = CartService(cart_store)
    app.state.cart_store = cart_store
    app.state.cart_service = cart_service
    app.state.order_service = OrderService(cart_service)


def get_cart_service(request: Request) -> CartService:
    return request.app.state.cart_service


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        logger.info("request_failed", path=request.url.path, code=exc.code, status=exc.status_code)
        return _error_response(exc)

    @app.exception_handler(ValidationError)
    async def domain_validation_error(request: Request, exc: ValidationError):
        return _error_response(StorefrontError("Validation failed", 400, "VALIDATION_ERROR", details=exc.messages))

    @app.exception_handler(ObjectNotFoundError)
    async def object_not_found(request: Request, exc: ObjectNotFoundError):
        return _error_response(StorefrontError("Resource not found", 404, "NOT_FOUND"))

    @app.exception_handler(ExpectedVersionError)
    async def version_conflict(request: Request, exc: ExpectedVersionError):
        logger.info("version_conflict", path=request.url.path, error=str(exc))
        return _error_response(StorefrontError("Resource was modified concurrently", 409, "CONFLICT"))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return _error_response(StorefrontError("Validation failed", 400, "VALIDATION_ERROR", details=details))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return _error_response(StorefrontError("Internal server error", 500, "INTERNAL_SERVER_ERROR"))


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------
def install_request_context(app: FastAPI, domain) -> None:
    """Run each request inside ``domain``'s context with request/user ids bound for logging."""

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        clear_context()
        add_context(
            request_id=request.headers.get("x-request-id") or str(uuid.uuid4()),
            user_id=request.headers.get("x-user-id"),
        )
        with domain.domain_context():
            response = await call_next(request)
        return response
