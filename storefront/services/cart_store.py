# storefront/services/cart_store.py
import redis

from storefront.domain.cart import Cart
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, CART_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# compare-and-delete in one step, a write from another tab in between is kept
_DELETE_IF_UNCHANGED_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class CartStore:
    """
    Session-scoped key-value persistence for the cart.
    One key per browsing session, the whole cart serialized on every write.
    """

    def __init__(self, client=None, ttl: int = CART_TTL_SECONDS):
        self.redis = client or redis.Redis.from_url(REDIS_URL, decode_responses=True)
        self.ttl = ttl

    @staticmethod
    def key(session_id: str) -> str:
        return f"cart:{session_id}"

    @redis_retry()
    def read_raw(self, session_id: str) -> str | None:
        key = self.key(session_id)
        try:
            return self.redis.get(key)
        except UnicodeDecodeError:
            # decode_responses client, value is not text at all
            logger.warning(f"Stored cart under {key} is not valid UTF-8, starting empty")
            return None

    def load(self, session_id: str) -> Cart:
        return Cart.loads(self.read_raw(session_id))

    @redis_retry()
    def save(self, session_id: str, cart: Cart) -> None:
        key = self.key(session_id)
        logger.info(f"Saving {len(cart)} cart lines under {key}")
        self.redis.set(name=key, value=cart.dumps(), ex=self.ttl)

    @redis_retry()
    def delete(self, session_id: str) -> None:
        self.redis.delete(self.key(session_id))

    @redis_retry()
    def delete_if_unchanged(self, session_id: str, expected: str) -> bool:
        key = self.key(session_id)
        res = self.redis.eval(_DELETE_IF_UNCHANGED_LUA, 1, key, expected)
        return bool(res)
