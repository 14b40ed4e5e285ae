from redis.asyncio import Redis

from cronsync.client import key, store_errors
from cronsync.domain.stats import JobStats

# Hash fields owned by the stats record
STATS_FIELDS = ("lastRun", "duration", "status", "instanceId", "error")


class RedisStatsStore:
    """
    Stats store writing the hash ``stats:<name>``.

    A write overwrites the record in place; fields the new run does not carry
    (``duration`` after a failure, ``error`` after a success) are deleted in
    the same MULTI/EXEC so readers never see a mix of two runs.
    """

    def __init__(self, client: Redis, key_prefix: str = ""):
        self.client: Redis = client
        self.key_prefix: str = key_prefix

    def stats_key(self, name: str) -> str:
        return key(self.key_prefix, "stats", name)

    async def record(self, name: str, stats: JobStats) -> None:
        fields = stats.to_hash()
        stale = [field for field in STATS_FIELDS if field not in fields]
        stats_key = self.stats_key(name)

        with store_errors(f"stats write for {name}"):
            async with self.client.pipeline(transaction=True) as pipe:
                if stale:
                    pipe.hdel(stats_key, *stale)
                pipe.hset(stats_key, mapping=fields)
                await pipe.execute()

    async def get(self, name: str) -> JobStats:
        with store_errors(f"stats read for {name}"):
            data = await self.client.hgetall(self.stats_key(name))
        return JobStats.from_hash(data or {})
