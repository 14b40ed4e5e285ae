from typing import AsyncContextManager, Protocol


class DistributedLock(Protocol):
    """
    Protocol class for cross-instance mutual exclusion keyed by job name.
    """

    async def acquire(self, name: str, token: str, ttl: int) -> bool:
        """
        Take the lock for `name` if nobody holds it.

        Args:
            name (str): Job name the lock is derived from.
            token (str): Owner token of this acquisition attempt.
            ttl (int): Expiry in milliseconds.

        Returns:
            bool: True iff this call created the lock.
        """
        ...

    async def release(self, name: str, token: str) -> bool:
        """
        Drop the lock for `name` only if it is still held by `token`.
        A missing or foreign lock is left alone and is not an error.
        """
        ...

    def held(self, name: str, token: str, ttl: int) -> AsyncContextManager[bool]:
        """Acquire on enter, release on every exit path if acquired."""
        ...
