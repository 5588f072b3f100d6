"""Application tests for checkout and the order lifecycle through OrderService."""

import json

import pytest
from protean import current_domain

from storefront.catalogue.product.management import UpdateProduct
from storefront.catalogue.product.product import Product
from storefront.ordering.cart.memory import InMemoryCartStore
from storefront.ordering.cart.service import CartService
from storefront.ordering.order import placement
from storefront.ordering.order.order import Order, OrderStatus
from storefront.ordering.order.placement import PlaceOrder
from storefront.ordering.service import OrderService
from storefront.shared.errors import StorefrontError

USER = "user-1"


def _stock(product):
    return current_domain.repository_for(Product).get(str(product.id)).stock


def _order_count():
    return current_domain.repository_for(Order)._dao.query.all().total


class TestCreateOrder:
    def test_reference_scenario(self, make_product, make_address, cart_service, order_service):
        product = make_product(price=100.0, stock=5)
        address = make_address(user_id=USER)
        cart_service.add_to_cart(USER, str(product.id), 2)

        order = order_service.create_order(USER, str(address.id), tax_rate=0.1, shipping_cost=10)

        assert order.status == OrderStatus.PENDING.value
        assert order.subtotal == 200.0
        assert order.tax == 20.0
        assert order.shipping == 10.0
        assert order.total == 230.0
        assert order.order_number.startswith("ORD-")

    def test_items_snapshot_and_stock_decrement(self, make_product, place_order):
        shirt = make_product(price=25.0, stock=10)
        mug = make_product(price=8.0, stock=4)

        order = place_order(USER, (shirt, 3), (mug, 4))

        items = {str(item.product_id): item for item in order.items}
        assert items[str(shirt.id)].quantity == 3
        assert items[str(shirt.id)].price == 25.0
        assert items[str(shirt.id)].total == 75.0
        assert items[str(mug.id)].total == 32.0
        assert _stock(shirt) == 7
        assert _stock(mug) == 0

    def test_cart_is_cleared_after_checkout(self, make_product, place_order, cart_service):
        product = make_product(stock=5)
        place_order(USER, (product, 1))

        assert cart_service.get_cart(USER).is_empty

    def test_price_snapshot_survives_repricing(self, make_product, place_order, order_service):
        product = make_product(price=40.0, stock=5)
        order = place_order(USER, (product, 1))

        current_domain.process(UpdateProduct(product_id=str(product.id), price=55.0), asynchronous=False)

        reloaded = order_service.get_order_by_id(str(order.id), USER)
        assert reloaded.items[0].price == 40.0
        assert reloaded.subtotal == 40.0

    def test_empty_cart_fails_before_any_write(self, make_product, make_address, order_service):
        product = make_product(stock=5)
        address = make_address(user_id=USER)

        with pytest.raises(StorefrontError) as exc:
            order_service.create_order(USER, str(address.id))

        assert exc.value.code == "CART_EMPTY"
        assert _order_count() == 0
        assert _stock(product) == 5

    def test_invalid_cart_carries_issues_and_leaves_cart(self, make_product, make_address, cart_service, cart_store, order_service):
        product = make_product(name="Kettle", stock=5)
        address = make_address(user_id=USER)
        cart_service.add_to_cart(USER, str(product.id), 5)
        current_domain.process(UpdateProduct(product_id=str(product.id), stock=1), asynchronous=False)

        with pytest.raises(StorefrontError) as exc:
            order_service.create_order(USER, str(address.id))

        assert exc.value.code == "CART_INVALID"
        assert exc.value.details == ["Only 1 items of Kettle available (you have 5 in cart)"]
        assert cart_store.quantity(USER, str(product.id)) == 5
        assert _order_count() == 0

    def test_missing_address(self, order_service):
        with pytest.raises(StorefrontError) as exc:
            order_service.create_order(USER, "no-such-address")
        assert exc.value.code == "ADDRESS_NOT_FOUND"
        assert exc.value.status_code == 404

    def test_someone_elses_address(self, make_product, make_address, cart_service, order_service):
        product = make_product(stock=5)
        address = make_address(user_id="user-2")
        cart_service.add_to_cart(USER, str(product.id), 1)

        with pytest.raises(StorefrontError) as exc:
            order_service.create_order(USER, str(address.id))

        assert exc.value.code == "FORBIDDEN"
        assert exc.value.status_code == 403

    def test_cart_clear_failure_keeps_order(self, make_product, make_address):
        class FlakyStore(InMemoryCartStore):
            def clear(self, user_id):
                raise ConnectionError("cache unavailable")

        cart_service = CartService(FlakyStore())
        service = OrderService(cart_service)
        product = make_product(stock=5)
        address = make_address(user_id=USER)
        cart_service.add_to_cart(USER, str(product.id), 2)

        order = service.create_order(USER, str(address.id))

        assert _order_count() == 1
        assert order.status == "Pending"
        assert _stock(product) == 3


class TestPlaceOrderUnitOfWork:
    def _command(self, lines, user_id=USER):
        return PlaceOrder(
            order_number="ORD-1700000000000-RACE001",
            user_id=user_id,
            shipping_address_id="addr-1",
            items=json.dumps(lines),
            subtotal=10.0,
            tax=1.0,
            shipping=10.0,
            total=21.0,
        )

    def test_insufficient_stock_aborts_everything(self, make_product):
        plenty = make_product(name="Plenty", stock=10, price=5.0)
        scarce = make_product(name="Scarce", stock=1, price=5.0)
        lines = [
            {"product_id": str(plenty.id), "name": plenty.name, "quantity": 1, "price": 5.0},
            {"product_id": str(scarce.id), "name": scarce.name, "quantity": 2, "price": 5.0},
        ]

        with pytest.raises(StorefrontError) as exc:
            current_domain.process(self._command(lines), asynchronous=False)

        assert exc.value.code == "INSUFFICIENT_STOCK"
        assert exc.value.message == "Insufficient stock for Scarce. Available: 1"
        assert _stock(plenty) == 10
        assert _stock(scarce) == 1
        assert _order_count() == 0

    def test_inactive_product_aborts(self, make_product):
        product = make_product(name="Old", stock=10, is_active=False)
        lines = [{"product_id": str(product.id), "name": "Old", "quantity": 1, "price": 5.0}]

        with pytest.raises(StorefrontError) as exc:
            current_domain.process(self._command(lines), asynchronous=False)

        assert exc.value.code == "PRODUCT_UNAVAILABLE"
        assert exc.value.message == "Product Old is no longer available"

    def test_stale_product_write_reports_insufficient_stock(
        self, monkeypatch, make_product, make_address, cart_service, order_service
    ):
        product = make_product(stock=1)
        address = make_address(user_id=USER)
        cart_service.add_to_cart(USER, str(product.id), 1)

        stale = current_domain.repository_for(Product).get(str(product.id))
        # A competing write lands after the checkout loaded the product
        current_domain.process(UpdateProduct(product_id=str(product.id), stock=1), asynchronous=False)
        monkeypatch.setattr(placement, "find_product", lambda product_id: stale)

        with pytest.raises(StorefrontError) as exc:
            order_service.create_order(USER, str(address.id))

        assert exc.value.code == "INSUFFICIENT_STOCK"
        assert _stock(product) == 1
        assert _order_count() == 0
        assert cart_service.get_cart(USER).total_items == 1


class TestQueries:
    def test_get_orders_newest_first_with_pagination(self, make_product, place_order, order_service):
        product = make_product(stock=50)
        for _ in range(3):
            place_order(USER, (product, 1))
        place_order("user-2", (product, 1))

        first = order_service.get_orders(user_id=USER, page=1, limit=2)
        second = order_service.get_orders(user_id=USER, page=2, limit=2)

        assert first.total == 3
        assert first.meta() == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
        assert len(first.items) == 2
        assert len(second.items) == 1
        stamps = [order.created_at for order in first.items + second.items]
        assert stamps == sorted(stamps, reverse=True)
        assert all(str(order.user_id) == USER for order in first.items + second.items)

    def test_get_orders_by_status(self, make_product, place_order, order_service):
        product = make_product(stock=50)
        first = place_order(USER, (product, 1))
        place_order(USER, (product, 1))
        order_service.update_order_status(str(first.id), "Confirmed")

        page = order_service.get_orders(status="Confirmed")
        assert [str(order.id) for order in page.items] == [str(first.id)]

    def test_admin_sees_all_orders(self, make_product, place_order, order_service):
        product = make_product(stock=50)
        place_order(USER, (product, 1))
        place_order("user-2", (product, 1))

        assert order_service.get_orders().total == 2

    def test_get_order_by_id(self, make_product, place_order, order_service):
        order = place_order(USER, (make_product(stock=5), 1))

        assert str(order_service.get_order_by_id(str(order.id), USER).id) == str(order.id)
        assert str(order_service.get_order_by_id(str(order.id)).id) == str(order.id)

    def test_get_order_by_id_forbidden(self, make_product, place_order, order_service):
        order = place_order(USER, (make_product(stock=5), 1))
        with pytest.raises(StorefrontError) as exc:
            order_service.get_order_by_id(str(order.id), "user-2")
        assert exc.value.code == "FORBIDDEN"

    def test_get_order_not_found(self, order_service):
        with pytest.raises(StorefrontError) as exc:
            order_service.get_order_by_id("missing")
        assert exc.value.code == "ORDER_NOT_FOUND"
        assert exc.value.status_code == 404


class TestLifecycle:
    def test_update_status_along_the_table(self, make_product, place_order, order_service):
        order = place_order(USER, (make_product(stock=5), 1))
        for status in ("Confirmed", "Processing", "Shipped", "Delivered"):
            order = order_service.update_order_status(str(order.id), status)
        assert order.status == "Delivered"

    def test_invalid_transition(self, make_product, place_order, order_service):
        order = place_order(USER, (make_product(stock=5), 1))
        with pytest.raises(StorefrontError) as exc:
            order_service.update_order_status(str(order.id), "Delivered")

        assert exc.value.code == "INVALID_STATUS_TRANSITION"
        assert order_service.get_order_by_id(str(order.id)).status == "Pending"

    def test_cancel_restores_stock(self, make_product, place_order, order_service):
        shirt = make_product(stock=10)
        mug = make_product(stock=6)
        order = place_order(USER, (shirt, 3), (mug, 6))
        assert (_stock(shirt), _stock(mug)) == (7, 0)

        cancelled = order_service.cancel_order(str(order.id), USER)

        assert cancelled.status == "Cancelled"
        assert (_stock(shirt), _stock(mug)) == (10, 6)

    def test_cancel_twice(self, make_product, place_order, order_service):
        product = make_product(stock=5)
        order = place_order(USER, (product, 2))
        order_service.cancel_order(str(order.id), USER)

        with pytest.raises(StorefrontError) as exc:
            order_service.cancel_order(str(order.id), USER)

        assert exc.value.code == "ALREADY_CANCELLED"
        assert _stock(product) == 5

    def test_cannot_cancel_delivered(self, make_product, place_order, order_service):
        product = make_product(stock=5)
        order = place_order(USER, (product, 2))
        for status in ("Confirmed", "Processing", "Shipped", "Delivered"):
            order_service.update_order_status(str(order.id), status)

        with pytest.raises(StorefrontError) as exc:
            order_service.cancel_order(str(order.id))

        assert exc.value.code == "CANNOT_CANCEL_DELIVERED"
        assert _stock(product) == 3

    def test_cancel_by_another_customer_is_forbidden(self, make_product, place_order, order_service):
        product = make_product(stock=5)
        order = place_order(USER, (product, 2))

        with pytest.raises(StorefrontError) as exc:
            order_service.cancel_order(str(order.id), "user-2")

        assert exc.value.code == "FORBIDDEN"
        assert order_service.get_order_by_id(str(order.id)).status == "Pending"
        assert _stock(product) == 3

    def test_admin_cancel(self, make_product, place_order, order_service):
        product = make_product(stock=5)
        order = place_order(USER, (product, 2))

        assert order_service.cancel_order(str(order.id)).status == "Cancelled"
        assert _stock(product) == 5
