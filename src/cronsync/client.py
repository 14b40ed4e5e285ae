"""Redis connection management and error translation."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.asyncio.connection import parse_url
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from cronsync.config import CronSyncSettings
from cronsync.exceptions import LockStoreUnavailable
from cronsync.logging_utils import get_logger

logger = get_logger("client")


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """
    Translate connectivity failures raised inside the block into
    `LockStoreUnavailable`. Other redis errors propagate unchanged.
    """
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        logger.error(f"Redis unavailable during {operation}: {e}")
        raise LockStoreUnavailable(operation, e) from e


def create_client(settings: CronSyncSettings) -> Redis:
    return redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.socket_timeout,
        socket_connect_timeout=settings.socket_connect_timeout,
    )


async def ping(client: Redis) -> None:
    with store_errors("connect"):
        await client.ping()


async def connect_store(settings: CronSyncSettings) -> Redis:
    """
    Open a client for `settings.redis_url` and make sure the server answers.

    Raises:
        LockStoreUnavailable: If the server cannot be reached.
    """
    client = create_client(settings)
    try:
        await ping(client)
    except LockStoreUnavailable:
        await client.aclose()
        raise
    logger.info("Redis connection established", extra=describe_url(settings.redis_url))
    return client


def describe_url(url: str) -> Dict[str, Any]:
    """Where `url` points, without credentials."""
    parts = parse_url(url)
    if "path" in parts:
        return {"path": parts["path"], "db": parts.get("db", 0)}
    return {"host": parts.get("host", "localhost"), "port": parts.get("port", 6379), "db": parts.get("db", 0)}


def key(prefix: str, kind: str, name: str) -> str:
    """Build ``[prefix:]kind:name``."""
    if prefix:
        return f"{prefix}:{kind}:{name}"
    return f"{kind}:{name}"
