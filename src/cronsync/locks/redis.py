from contextlib import asynccontextmanager
from typing import AsyncIterator

from redis.asyncio import Redis

from cronsync.client import key, store_errors
from cronsync.logging_utils import get_logger

logger = get_logger("locks")

# Compare-and-delete must run server side; a GET followed by a DEL would let
# another owner's lock slip in between.
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class RedisLock:
    """
    Redis-backed lock with owner tokens.

    The lock for job `name` is the string key ``lock:<name>`` holding the owner
    token, created with ``SET NX PX`` so it expires on its own if the holder
    dies. There is no renewal: a holder running longer than the TTL loses the
    lock while still running.
    """

    def __init__(self, client: Redis, key_prefix: str = ""):
        self.client: Redis = client
        self.key_prefix: str = key_prefix

    def lock_key(self, name: str) -> str:
        return key(self.key_prefix, "lock", name)

    async def acquire(self, name: str, token: str, ttl: int) -> bool:
        with store_errors(f"lock acquire for {name}"):
            acquired = await self.client.set(self.lock_key(name), token, px=ttl, nx=True)
        if acquired:
            logger.debug(f"Lock acquired: {name}", extra={"token": token, "ttl": ttl})
            return True
        return False

    async def release(self, name: str, token: str) -> bool:
        with store_errors(f"lock release for {name}"):
            deleted = await self.client.eval(RELEASE_SCRIPT, 1, self.lock_key(name), token)
        if deleted:
            logger.debug(f"Lock released: {name}", extra={"token": token})
            return True
        logger.debug(f"Lock not released (expired or owned elsewhere): {name}", extra={"token": token})
        return False

    async def is_locked(self, name: str) -> bool:
        with store_errors(f"lock lookup for {name}"):
            return await self.client.exists(self.lock_key(name)) > 0

    @asynccontextmanager
    async def held(self, name: str, token: str, ttl: int) -> AsyncIterator[bool]:
        """
        Scoped acquisition.

        Usage:
            async with lock.held("backup", token, 5000) as acquired:
                if acquired:
                    ...

        Yields whether the lock was taken. When it was, the release runs on
        every way out of the block, including exceptions and cancellation.
        """
        acquired = await self.acquire(name, token, ttl)
        if not acquired:
            yield False
            return
        try:
            yield True
        finally:
            try:
                await self.release(name, token)
            except Exception:
                logger.error(f"Lock release failed: {name}", extra={"token": token})
                raise
