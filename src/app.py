"""Storefront FastAPI application.

Single-domain web server that processes commands synchronously via HTTP.
Every request runs inside the storefront domain context, with a request id
and the caller's user id bound into the structured log context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront import elements  # noqa: F401
from storefront.domain import storefront

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from domain.toml.
storefront.init()

from storefront.admin.api.routes import admin_router  # noqa: E402
from storefront.catalogue.api import category_router, product_router  # noqa: E402
from storefront.identity.api.routes import address_router, user_router  # noqa: E402
from storefront.ordering.api.routes import cart_router, order_router  # noqa: E402
from storefront.ordering.cart import build_cart_store  # noqa: E402
from storefront.reviews.api.routes import review_router  # noqa: E402
from storefront.shared.api import bind_services, install_request_context, register_error_handlers  # noqa: E402
from storefront.utils.logging import get_logger  # noqa: E402

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: cart store handle
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    cart_store = build_cart_store()
    bind_services(app, cart_store)
    logger.info("cart_store_ready", store=type(cart_store).__name__, ttl=cart_store.ttl)
    try:
        yield
    finally:
        cart_store.close()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="E-commerce backend: catalogue, cart, checkout, orders, reviews, addresses and user accounts",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_request_context(app, storefront)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(product_router)
app.include_router(category_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(address_router)
app.include_router(user_router)
app.include_router(review_router)
app.include_router(admin_router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health(request: Request):
    cart_store = getattr(request.app.state, "cart_store", None)
    cart_ok = cart_store.ping() if cart_store is not None else False
    return JSONResponse(
        status_code=200 if cart_ok else 503,
        content={
            "status": "ok" if cart_ok else "degraded",
            "domain": storefront.name,
            "cart_store": "ok" if cart_ok else "unavailable",
        },
    )
