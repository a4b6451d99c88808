import logging
from contextlib import contextmanager

import redis
from flask import current_app

from .. import extensions
from ..errors import StoreUnavailable

logger = logging.getLogger(__name__)


@contextmanager
def gate_lock(name: str):
    """Serialize one gate per account/project while Redis is available.

    The conditional write in the store is what enforces the limit; this lock
    only narrows the window in which concurrent requests race for it.
    """
    client = extensions.get_redis()
    if client is None:
        yield
        return

    timeout = current_app.config.get("GATE_LOCK_TIMEOUT", 5)
    lock = client.lock(f"revisify:gate:{name}", timeout=timeout, blocking_timeout=timeout)
    try:
        acquired = lock.acquire()
    except redis.RedisError as exc:
        logger.warning("Gate lock %s unavailable, continuing without it: %s", name, exc)
        acquired = None

    if acquired is None:
        yield
        return

    if not acquired:
        raise StoreUnavailable("Another request is being processed. Please try again.")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.RedisError as exc:
            logger.warning("Could not release gate lock %s: %s", name, exc)
