# revisify/extensions.py

import logging

from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import redis

db = SQLAlchemy()
cors = CORS()
redis_client = None

logger = logging.getLogger(__name__)


def init_redis(app):
    """Initialize Redis using REDIS_URL from config."""
    global redis_client

    url = app.config.get("REDIS_URL")
    if not url:
        logger.info("No REDIS_URL configured; gate locks disabled")
        redis_client = None
        return

    try:
        client = redis.Redis.from_url(url, decode_responses=True)
        client.ping()
        redis_client = client
        app.logger.info("Redis initialized successfully.")
    except redis.RedisError as exc:
        redis_client = None
        app.logger.warning(f"Redis initialization failed: {exc}")


def get_redis():
    return redis_client
