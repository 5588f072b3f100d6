import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront import elements  # noqa: F401
    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Catalogue and address factories
# ---------------------------------------------------------------------------
@pytest.fixture
def make_category():
    from protean import current_domain

    from storefront.catalogue.category.category import Category
    from storefront.catalogue.category.management import CreateCategory

    counter = {"n": 0}

    def _make(name=None, slug=None, parent_id=None, description=None):
        counter["n"] += 1
        name = name or f"Category {counter['n']}"
        category_id = current_domain.process(
            CreateCategory(
                name=name,
                slug=slug or f"category-{counter['n']}",
                description=description,
                parent_id=parent_id,
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Category).get(category_id)

    return _make


@pytest.fixture
def category(make_category):
    return make_category(name="Apparel", slug="apparel")


@pytest.fixture
def make_product(category):
    from protean import current_domain

    from storefront.catalogue.product.management import CreateProduct
    from storefront.catalogue.product.product import Product

    counter = {"n": 0}

    def _make(name=None, price=100.0, stock=10, is_active=True, category_id=None, **extra):
        counter["n"] += 1
        product_id = current_domain.process(
            CreateProduct(
                name=name or f"Product {counter['n']}",
                slug=extra.pop("slug", f"product-{counter['n']}"),
                sku=extra.pop("sku", f"SKU-{counter['n']:04d}"),
                price=price,
                stock=stock,
                is_active=is_active,
                category_id=category_id or str(category.id),
                **extra,
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Product).get(product_id)

    return _make


@pytest.fixture
def make_address():
    from protean import current_domain

    from storefront.identity.address.address import Address
    from storefront.identity.address.management import AddAddress

    def _make(user_id="user-1", is_default=False, city="Springfield"):
        address_id = current_domain.process(
            AddAddress(
                user_id=user_id,
                street="742 Evergreen Terrace",
                city=city,
                state="IL",
                zip_code="62701",
                country="US",
                is_default=is_default,
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Address).get(address_id)

    return _make


@pytest.fixture
def make_user():
    from protean import current_domain

    from storefront.identity.user.account import ChangeUserRole, RegisterUser
    from storefront.identity.user.user import User

    def _make(user_id="user-1", email=None, first_name="Jane", last_name="Doe", role=None):
        current_domain.process(
            RegisterUser(
                user_id=user_id,
                email=email or f"{user_id}@example.com",
                first_name=first_name,
                last_name=last_name,
            ),
            asynchronous=False,
        )
        if role:
            current_domain.process(ChangeUserRole(user_id=user_id, role=role), asynchronous=False)
        return current_domain.repository_for(User).get(user_id)

    return _make


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------
@pytest.fixture
def cart_store():
    from storefront.ordering.cart.memory import InMemoryCartStore

    return InMemoryCartStore()


@pytest.fixture
def cart_service(cart_store):
    from storefront.ordering.cart.service import CartService

    return CartService(cart_store)


@pytest.fixture
def order_service(cart_service):
    from storefront.ordering.service import OrderService

    return OrderService(cart_service)


@pytest.fixture
def place_order(make_address, cart_service, order_service):
    """Check out ``quantity`` units of each given product for ``user_id``."""

    def _place(user_id, *lines):
        address = make_address(user_id=user_id)
        for product, quantity in lines:
            cart_service.add_to_cart(user_id, str(product.id), quantity)
        return order_service.create_order(user_id, str(address.id))

    return _place


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
@pytest.fixture
def app(cart_store):
    from fastapi import FastAPI

    from storefront.admin.api.routes import admin_router
    from storefront.catalogue.api import category_router, product_router
    from storefront.domain import storefront
    from storefront.identity.api.routes import address_router, user_router
    from storefront.ordering.api.routes import cart_router, order_router
    from storefront.reviews.api.routes import review_router
    from storefront.shared.api import bind_services, install_request_context, register_error_handlers

    app = FastAPI()
    install_request_context(app, storefront)
    for router in (
        product_router,
        category_router,
        cart_router,
        order_router,
        address_router,
        user_router,
        review_router,
        admin_router,
    ):
        app.include_router(router)
    register_error_handlers(app)
    bind_services(app, cart_store)
    return app


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


@pytest.fixture
def customer_headers():
    return {"X-User-Id": "user-1", "X-User-Role": "CUSTOMER"}


@pytest.fixture
def admin_headers():
    return {"X-User-Id": "admin-1", "X-User-Role": "ADMIN"}
