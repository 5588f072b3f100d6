"""Order aggregate: a persisted checkout with an immutable item snapshot.

Items capture product id, quantity and unit price at the moment of checkout,
so later catalogue price changes never alter a placed order. Orders are never
deleted; cancellation is a status change.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    PENDING / CONFIRMED / PROCESSING → CANCELLED
    DELIVERED and CANCELLED are terminal.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from storefront.shared.errors import StorefrontError, forbidden
from storefront.shared.money import line_total


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Statuses that count as a completed purchase for revenue and review eligibility
REVENUE_STATUSES = frozenset(
    {
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
    }
)


def allowed_transitions(status):
    """Statuses reachable from ``status`` through ``transition_to``."""
    return _VALID_TRANSITIONS[OrderStatus(status)]


def can_transition(current, target):
    return OrderStatus(target) in allowed_transitions(current)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line of an order: what was bought, how many, and at what price."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    user_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    total = Float(default=0.0)
    shipping_address_id = Identifier(required=True)
    items = HasMany(OrderItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, user_id, shipping_address_id, lines, totals):
        """Create a Pending order from priced cart lines.

        Args:
            order_number: Human-readable order number.
            user_id: The customer placing the order.
            shipping_address_id: Address the order ships to.
            lines: List of dicts with product_id, quantity and price.
            totals: An ``OrderTotals`` with subtotal, tax, shipping and total.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping=totals.shipping,
            total=totals.total,
            shipping_address_id=shipping_address_id,
            created_at=now,
            updated_at=now,
        )

        snapshot = []
        for line in lines:
            item = OrderItem(
                product_id=line["product_id"],
                quantity=line["quantity"],
                price=line["price"],
                total=line_total(line["price"], line["quantity"]),
            )
            order.add_items(item)
            snapshot.append(
                {
                    "product_id": str(item.product_id),
                    "quantity": item.quantity,
                    "price": item.price,
                    "total": item.total,
                }
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id),
                items=json.dumps(snapshot),
                subtotal=totals.subtotal,
                tax=totals.tax,
                shipping=totals.shipping,
                total=totals.total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------
    def assert_owned_by(self, user_id):
        """Reject access by a user other than the customer who placed the order.

        ``None`` means the caller is an admin acting on any order.
        """
        if user_id is not None and str(self.user_id) != str(user_id):
            raise forbidden()

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def transition_to(self, target_status):
        current = OrderStatus(self.status)
        target = OrderStatus(target_status)
        if not can_transition(current, target):
            raise StorefrontError(
                f"Cannot transition from {current.value} to {target.value}",
                400,
                "INVALID_STATUS_TRANSITION",
            )

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )

    def cancel(self, cancelled_by=None):
        """Mark the order cancelled. Restoring stock is the caller's job."""
        current = OrderStatus(self.status)
        if current == OrderStatus.DELIVERED:
            raise StorefrontError("Cannot cancel delivered order", 400, "CANNOT_CANCEL_DELIVERED")
        if current == OrderStatus.CANCELLED:
            raise StorefrontError("Order is already cancelled", 400, "ALREADY_CANCELLED")

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=current.value,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                cancelled_at=now,
            )
        )


def fetch_order(order_id):
    """Load an order or raise ``ORDER_NOT_FOUND``."""
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise StorefrontError("Order not found", 404, "ORDER_NOT_FOUND") from exc
