from __future__ import annotations

import os
from functools import lru_cache

import redis


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def create_redis() -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)


@lru_cache(maxsize=1)
def shared_redis() -> redis.Redis:
    """Process-wide client; live engines keep using it after the request that created them."""

    return create_redis()
