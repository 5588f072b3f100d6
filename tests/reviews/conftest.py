import pytest


@pytest.fixture
def purchased(make_product, place_order, order_service):
    """A product that ``user-1`` has bought in a confirmed order."""
    product = make_product(name="Desk Lamp", stock=20)
    order = place_order("user-1", (product, 1))
    order_service.update_order_status(str(order.id), "Confirmed")
    return product
