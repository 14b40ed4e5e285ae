from typing import Dict, Iterator, List, Optional

from cronsync.domain.job import JobEntry


class JobRegistry:
    """
    In-memory map of job id to JobEntry for one CronSync instance.

    Nothing here is shared with other instances or survives a restart.
    Iteration and `list()` follow insertion order.
    """

    def __init__(self):
        self._entries: Dict[str, JobEntry] = {}

    def put(self, entry: JobEntry) -> None:
        if entry.id in self._entries:
            raise ValueError(f"A job with id '{entry.id}' is already registered")
        self._entries[entry.id] = entry

    def get(self, job_id: str) -> Optional[JobEntry]:
        return self._entries.get(job_id)

    def remove(self, job_id: str) -> Optional[JobEntry]:
        return self._entries.pop(job_id, None)

    def list(self) -> List[JobEntry]:
        return list(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._entries

    def __iter__(self) -> Iterator[JobEntry]:
        return iter(self.list())
