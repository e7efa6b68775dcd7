import time
import redis
from libtrends.utils.logging_setup import configure_logging_from_env

logger = configure_logging_from_env(__name__)


class RateLimiter:
    """At most `rate` calls per identity in each fixed `per_seconds` window."""

    def __init__(self, client: redis.StrictRedis, key_prefix: str, rate: int, per_seconds: int):
        self.client = client
        self.key_prefix = key_prefix
        self.rate = rate
        self.per_seconds = per_seconds

    def _key(self, identity: str) -> str:
        window = int(time.time()) // self.per_seconds
        return f"rl:{self.key_prefix}:{identity}:{window}"

    def allow(self, identity: str) -> bool:
        key = self._key(identity)
        p = self.client.pipeline()
        p.incr(key, 1)
        p.expire(key, self.per_seconds)
        count, _ = p.execute()
        if count > self.rate:
            logger.warning("rate_limit_exceeded key=%s count=%d", key, count)
            return False
        return True
