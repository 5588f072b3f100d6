"""In-memory cart store for development and testing.

Mirrors the expiry semantics of the Redis adapter: a cart whose deadline has
passed reads as empty.
"""

import time

from storefront.ordering.cart.store import CartStore


class InMemoryCartStore(CartStore):
    def __init__(self, ttl: int | None = None, clock=time.monotonic):
        super().__init__(ttl)
        self._clock = clock
        self._carts: dict[str, dict[str, int]] = {}
        self._deadlines: dict[str, float] = {}

    def _live(self, user_id) -> dict[str, int] | None:
        key = self.key_for(user_id)
        deadline = self._deadlines.get(key)
        if deadline is not None and deadline <= self._clock():
            self._carts.pop(key, None)
            self._deadlines.pop(key, None)
        return self._carts.get(key)

    def _expire(self, user_id) -> None:
        key = self.key_for(user_id)
        if key in self._carts:
            self._deadlines[key] = self._clock() + self.ttl

    def entries(self, user_id) -> dict[str, int]:
        return dict(self._live(user_id) or {})

    def quantity(self, user_id, product_id) -> int:
        return (self._live(user_id) or {}).get(str(product_id), 0)

    def set_quantity(self, user_id, product_id, quantity: int) -> None:
        self._live(user_id)
        self._carts.setdefault(self.key_for(user_id), {})[str(product_id)] = int(quantity)
        self._expire(user_id)

    def remove(self, user_id, product_id) -> None:
        cart = self._live(user_id)
        if cart is None:
            return
        cart.pop(str(product_id), None)
        if not cart:
            self.clear(user_id)

    def clear(self, user_id) -> None:
        key = self.key_for(user_id)
        self._carts.pop(key, None)
        self._deadlines.pop(key, None)

    def touch(self, user_id) -> None:
        if self._live(user_id):
            self._expire(user_id)

    def ttl_for(self, user_id) -> float | None:
        """Seconds until the cart expires, ``None`` when there is no cart."""
        if self._live(user_id) is None:
            return None
        return self._deadlines[self.key_for(user_id)] - self._clock()
