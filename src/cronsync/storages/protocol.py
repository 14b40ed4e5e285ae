from typing import Protocol

from cronsync.domain.stats import JobStats


class StatsStore(Protocol):
    async def record(self, name: str, stats: JobStats) -> None:
        """Replace the latest execution record of `name` with `stats`."""
        ...

    async def get(self, name: str) -> JobStats:
        """Return the latest record of `name`, empty if it never ran."""
        ...
