"""Application tests for CartService against the catalogue and an in-memory store."""

import pytest
from protean import current_domain

from storefront.catalogue.product.management import UpdateProduct
from storefront.catalogue.product.product import Product
from storefront.shared.errors import StorefrontError

USER = "user-1"


def _deactivate(product):
    current_domain.process(UpdateProduct(product_id=str(product.id), is_active=False), asynchronous=False)


def _reprice(product, price):
    current_domain.process(UpdateProduct(product_id=str(product.id), price=price), asynchronous=False)


def _delete_silently(product):
    repo = current_domain.repository_for(Product)
    repo._dao.delete(repo.get(str(product.id)))


class TestGetCart:
    def test_empty_cart(self, cart_service):
        cart = cart_service.get_cart(USER)

        assert cart.items == []
        assert cart.total_items == 0
        assert cart.subtotal == 0.0

    def test_subtotal_uses_current_prices(self, cart_service, make_product):
        shirt = make_product(price=19.99, stock=10)
        mug = make_product(price=7.5, stock=10)
        cart_service.add_to_cart(USER, str(shirt.id), 3)
        cart_service.add_to_cart(USER, str(mug.id), 2)

        cart = cart_service.get_cart(USER)
        assert cart.total_items == 5
        assert cart.subtotal == 74.97

        _reprice(mug, 10.0)
        assert cart_service.get_cart(USER).subtotal == 79.97

    def test_inactive_and_missing_products_are_excluded_but_kept(self, cart_service, cart_store, make_product):
        kept = make_product(price=10.0)
        hidden = make_product(price=20.0)
        gone = make_product(price=30.0)
        for product in (kept, hidden, gone):
            cart_service.add_to_cart(USER, str(product.id), 1)

        _deactivate(hidden)
        _delete_silently(gone)

        cart = cart_service.get_cart(USER)
        assert [str(line.product.id) for line in cart.items] == [str(kept.id)]
        assert cart.subtotal == 10.0
        assert set(cart_store.entries(USER)) == {str(kept.id), str(hidden.id), str(gone.id)}

    def test_read_refreshes_ttl(self, cart_service, cart_store, make_product):
        product = make_product()
        cart_store.set_quantity(USER, str(product.id), 1)
        cart_store._deadlines[cart_store.key_for(USER)] -= 1000

        cart_service.get_cart(USER)

        assert cart_store.ttl_for(USER) > cart_store.ttl - 5


class TestAddToCart:
    def test_add_new_item(self, cart_service, make_product):
        product = make_product(price=100.0, stock=5)
        cart = cart_service.add_to_cart(USER, str(product.id), 2)

        assert cart.total_items == 2
        assert cart.subtotal == 200.0
        assert cart.items[0].line_total == 200.0

    def test_add_accumulates(self, cart_service, cart_store, make_product):
        product = make_product(stock=5)
        cart_service.add_to_cart(USER, str(product.id), 2)
        cart_service.add_to_cart(USER, str(product.id), 3)

        assert cart_store.quantity(USER, str(product.id)) == 5

    def test_insufficient_stock(self, cart_service, make_product):
        product = make_product(stock=5)
        with pytest.raises(StorefrontError) as exc:
            cart_service.add_to_cart(USER, str(product.id), 10)

        assert exc.value.code == "INSUFFICIENT_STOCK"
        assert exc.value.message == "Only 5 items available in stock"
        assert exc.value.status_code == 400

    def test_existing_quantity_counts_toward_stock(self, cart_service, make_product):
        product = make_product(stock=5)
        cart_service.add_to_cart(USER, str(product.id), 4)
        with pytest.raises(StorefrontError) as exc:
            cart_service.add_to_cart(USER, str(product.id), 2)
        assert exc.value.code == "INSUFFICIENT_STOCK"

    def test_missing_product(self, cart_service):
        with pytest.raises(StorefrontError) as exc:
            cart_service.add_to_cart(USER, "no-such-product", 1)
        assert exc.value.code == "PRODUCT_NOT_FOUND"
        assert exc.value.status_code == 404

    def test_inactive_product(self, cart_service, make_product):
        product = make_product(is_active=False)
        with pytest.raises(StorefrontError) as exc:
            cart_service.add_to_cart(USER, str(product.id), 1)
        assert exc.value.code == "PRODUCT_UNAVAILABLE"

    def test_negative_delta_to_zero_deletes_entry(self, cart_service, cart_store, make_product):
        product = make_product(stock=5)
        cart_service.add_to_cart(USER, str(product.id), 2)
        cart = cart_service.add_to_cart(USER, str(product.id), -2)

        assert cart.items == []
        assert str(product.id) not in cart_store.entries(USER)

    def test_add_then_remove_restores_item_count(self, cart_service, make_product):
        first = make_product(stock=10)
        second = make_product(stock=10)
        cart_service.add_to_cart(USER, str(first.id), 3)
        before = cart_service.get_cart(USER).total_items

        cart_service.add_to_cart(USER, str(second.id), 4)
        after = cart_service.remove_from_cart(USER, str(second.id))

        assert after.total_items == before


class TestUpdateCartItem:
    def test_sets_absolute_quantity(self, cart_service, cart_store, make_product):
        product = make_product(stock=10)
        cart_service.add_to_cart(USER, str(product.id), 2)
        cart_service.update_cart_item(USER, str(product.id), 7)

        assert cart_store.quantity(USER, str(product.id)) == 7

    def test_negative_quantity_rejected(self, cart_service, make_product):
        product = make_product()
        with pytest.raises(StorefrontError) as exc:
            cart_service.update_cart_item(USER, str(product.id), -1)
        assert exc.value.code == "INVALID_QUANTITY"

    def test_above_stock_rejected(self, cart_service, make_product):
        product = make_product(stock=3)
        with pytest.raises(StorefrontError) as exc:
            cart_service.update_cart_item(USER, str(product.id), 4)
        assert exc.value.message == "Only 3 items available in stock"

    def test_zero_is_equivalent_to_remove(self, cart_service, cart_store, make_product):
        product = make_product(stock=10)
        other = make_product(stock=10)
        cart_service.add_to_cart(USER, str(product.id), 2)
        cart_service.add_to_cart(USER, str(other.id), 1)
        cart_service.add_to_cart("user-2", str(product.id), 2)
        cart_service.add_to_cart("user-2", str(other.id), 1)

        updated = cart_service.update_cart_item(USER, str(product.id), 0)
        removed = cart_service.remove_from_cart("user-2", str(product.id))

        assert cart_store.entries(USER) == cart_store.entries("user-2")
        assert updated.total_items == removed.total_items
        assert updated.subtotal == removed.subtotal


class TestClearCart:
    def test_clear(self, cart_service, make_product):
        product = make_product()
        cart_service.add_to_cart(USER, str(product.id), 1)
        cart_service.clear_cart(USER)

        assert cart_service.get_cart(USER).is_empty


class TestValidateCart:
    def test_valid_cart(self, cart_service, make_product):
        product = make_product(stock=5)
        cart_service.add_to_cart(USER, str(product.id), 2)

        result = cart_service.validate_cart(USER)
        assert result.is_valid
        assert result.errors == []
        assert result.cart.total_items == 2

    def test_inactive_product_is_reported_and_removed(self, cart_service, cart_store, make_product):
        keep = make_product(stock=5)
        hidden = make_product(name="Retired Mug", stock=5)
        cart_service.add_to_cart(USER, str(keep.id), 1)
        cart_service.add_to_cart(USER, str(hidden.id), 1)
        _deactivate(hidden)

        result = cart_service.validate_cart(USER)

        assert not result.is_valid
        assert result.errors == ["Product Retired Mug is no longer available"]
        assert str(hidden.id) not in cart_store.entries(USER)
        assert [str(line.product.id) for line in result.cart.items] == [str(keep.id)]

    def test_missing_product_is_reported_and_removed(self, cart_service, cart_store, make_product):
        gone = make_product(stock=5)
        cart_service.add_to_cart(USER, str(gone.id), 1)
        _delete_silently(gone)

        result = cart_service.validate_cart(USER)

        assert not result.is_valid
        assert len(result.errors) == 1
        assert "no longer available" in result.errors[0]
        assert cart_store.entries(USER) == {}

    def test_stock_shortfall_is_reported_but_kept(self, cart_service, cart_store, make_product):
        product = make_product(name="Lamp", stock=5)
        cart_service.add_to_cart(USER, str(product.id), 4)
        current_domain.process(UpdateProduct(product_id=str(product.id), stock=2), asynchronous=False)

        result = cart_service.validate_cart(USER)

        assert not result.is_valid
        assert result.errors == ["Only 2 items of Lamp available (you have 4 in cart)"]
        assert cart_store.quantity(USER, str(product.id)) == 4
