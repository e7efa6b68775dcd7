import pybreaker

from libtrends.config import BREAKER_FAIL_MAX, BREAKER_RESET_TIMEOUT
from libtrends.utils.logging_setup import configure_logging_from_env

logger = configure_logging_from_env(__name__)


class LoggingListener(pybreaker.CircuitBreakerListener):
    def state_change(self, cb, old_state, new_state):
        logger.warning(
            "breaker_state name=%s from=%s to=%s",
            cb.name, getattr(old_state, "name", old_state), getattr(new_state, "name", new_state),
        )

    def failure(self, cb, exc):
        logger.debug("breaker_failure name=%s count=%d err=%s", cb.name, cb.fail_counter, exc)


def make_breaker(name: str, fail_max: int = BREAKER_FAIL_MAX, reset_timeout: int = BREAKER_RESET_TIMEOUT):
    return pybreaker.CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        listeners=[LoggingListener()],
        name=name,
    )


zotero_breaker = make_breaker("zotero")
