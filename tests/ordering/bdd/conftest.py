"""Shared BDD fixtures and step definitions for checkout and order lifecycle."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from storefront.catalogue.product.management import UpdateProduct
from storefront.catalogue.product.product import Product
from storefront.ordering.order.order import Order, OrderStatus
from storefront.shared.errors import StorefrontError

CUSTOMER = "user-1"

# Forward path through the state machine, used to move an order to a later status
_FORWARD = [
    OrderStatus.CONFIRMED.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
]


@pytest.fixture()
def products():
    """Products created by the scenario, keyed by name."""
    return {}


@pytest.fixture()
def context():
    return {"address": None, "order": None, "error": None}


def _product(products, name):
    return current_domain.repository_for(Product).get(str(products[name].id))


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the customer has a shipping address")
def _(context, make_address):
    context["address"] = make_address(user_id=CUSTOMER)


@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(products, make_product, name, price, stock):
    products[name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the customer has {quantity:d} "{name}" in the cart'))
def _(products, cart_service, name, quantity):
    cart_service.add_to_cart(CUSTOMER, str(products[name].id), quantity)


@given(parsers.cfparse('the stock of "{name}" drops to {stock:d}'))
def _(products, name, stock):
    current_domain.process(UpdateProduct(product_id=str(products[name].id), stock=stock), asynchronous=False)


@given(parsers.cfparse('"{name}" is deactivated'))
def _(products, name):
    current_domain.process(UpdateProduct(product_id=str(products[name].id), is_active=False), asynchronous=False)


@given("the customer has checked out")
def _(context, order_service):
    context["order"] = order_service.create_order(CUSTOMER, str(context["address"].id))


@given(parsers.cfparse('the order has moved to "{status}"'))
def _(context, order_service, status):
    for step in _FORWARD[: _FORWARD.index(status) + 1]:
        context["order"] = order_service.update_order_status(str(context["order"].id), step)


@given("the customer has cancelled the order")
def _(context, order_service):
    context["order"] = order_service.cancel_order(str(context["order"].id), CUSTOMER)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request fails with "{code}"'))
def _(context, code):
    assert context["error"] is not None
    assert context["error"].code == code


@then(parsers.cfparse('the order is "{status}"'))
def _(context, order_service, status):
    order = order_service.get_order_by_id(str(context["order"].id))
    assert order.status == status


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, name, stock):
    assert _product(products, name).stock == stock


@then("no order exists")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().total == 0


@then("the cart is empty")
def _(cart_service):
    assert cart_service.get_cart(CUSTOMER).is_empty
