"""Redis-backed cart store.

Each cart is a Redis hash at ``cart:{user_id}``; quantities are stored as
decimal strings. Upserts and expiry refreshes go through a transactional
pipeline so a cart is never left without an expiry.
"""

import redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from storefront.ordering.cart.store import CartStore


class RedisCartStore(CartStore):
    def __init__(self, client: redis.Redis, ttl: int | None = None):
        super().__init__(ttl)
        self.client = client

    @classmethod
    def from_url(cls, url: str, ttl: int | None = None) -> "RedisCartStore":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            retry=Retry(ExponentialBackoff(), 3),
            retry_on_error=[redis.exceptions.ConnectionError, redis.exceptions.TimeoutError],
        )
        return cls(client, ttl)

    def entries(self, user_id) -> dict[str, int]:
        raw = self.client.hgetall(self.key_for(user_id))
        return {product_id: int(quantity) for product_id, quantity in raw.items()}

    def quantity(self, user_id, product_id) -> int:
        value = self.client.hget(self.key_for(user_id), str(product_id))
        return int(value) if value is not None else 0

    def set_quantity(self, user_id, product_id, quantity: int) -> None:
        key = self.key_for(user_id)
        pipe = self.client.pipeline()
        pipe.hset(key, str(product_id), str(int(quantity)))
        pipe.expire(key, self.ttl)
        pipe.execute()

    def remove(self, user_id, product_id) -> None:
        self.client.hdel(self.key_for(user_id), str(product_id))

    def clear(self, user_id) -> None:
        self.client.delete(self.key_for(user_id))

    def touch(self, user_id) -> None:
        self.client.expire(self.key_for(user_id), self.ttl)

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.exceptions.RedisError:
            return False

    def close(self) -> None:
        self.client.close()
