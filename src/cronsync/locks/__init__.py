from .protocol import DistributedLock
from .redis import RedisLock, RELEASE_SCRIPT

__all__ = ["DistributedLock", "RedisLock", "RELEASE_SCRIPT"]
