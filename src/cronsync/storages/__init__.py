from .protocol import StatsStore
from .redis import RedisStatsStore

__all__ = ["StatsStore", "RedisStatsStore"]
