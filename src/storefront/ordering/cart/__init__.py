"""Cart store factory.

Builds the cart store once at process start:
- RedisCartStore when ``REDIS_URL`` is set
- InMemoryCartStore otherwise (development and testing)
"""

import os

from storefront.ordering.cart.memory import InMemoryCartStore
from storefront.ordering.cart.redis_store import RedisCartStore
from storefront.ordering.cart.store import CartStore


def build_cart_store(url: str | None = None, ttl: int | None = None) -> CartStore:
    """Return a Redis store for ``url`` (or ``REDIS_URL``), else an in-memory one."""
    url = url or os.getenv("REDIS_URL")
    if url:
        return RedisCartStore.from_url(url, ttl=ttl)
    return InMemoryCartStore(ttl=ttl)
