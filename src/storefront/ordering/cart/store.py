"""Cart store port (abstract interface).

A cart is a per-user hash in a key-value store: field = product id, value =
integer quantity. Every mutating access, and every read of a non-empty cart,
pushes the expiry forward by ``ttl`` seconds.
"""

import os
from abc import ABC, abstractmethod

DEFAULT_CART_TTL = 7 * 24 * 60 * 60  # 604800 seconds


def cart_ttl() -> int:
    return int(os.getenv("CART_TTL_SECONDS", DEFAULT_CART_TTL))


class CartStore(ABC):
    """Abstract cart store interface."""

    def __init__(self, ttl: int | None = None):
        self.ttl = ttl if ttl is not None else cart_ttl()

    @staticmethod
    def key_for(user_id) -> str:
        return f"cart:{user_id}"

    @abstractmethod
    def entries(self, user_id) -> dict[str, int]:
        """Return every ``product_id → quantity`` pair in the user's cart."""
        ...

    @abstractmethod
    def quantity(self, user_id, product_id) -> int:
        """Return the stored quantity for one product, 0 when absent."""
        ...

    @abstractmethod
    def set_quantity(self, user_id, product_id, quantity: int) -> None:
        """Upsert one entry and refresh the expiry."""
        ...

    @abstractmethod
    def remove(self, user_id, product_id) -> None:
        ...

    @abstractmethod
    def clear(self, user_id) -> None:
        ...

    @abstractmethod
    def touch(self, user_id) -> None:
        """Refresh the expiry without changing contents."""
        ...

    def ping(self) -> bool:
        return True

    def close(self) -> None:  # noqa: B027
        pass
