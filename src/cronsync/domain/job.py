import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field


def new_job_id(name: str) -> str:
    return f"{name}_{uuid.uuid4().hex}"


class JobEntry(BaseModel):
    """
    A job scheduled on this instance.

    Entries are local to the instance that created them and are never
    persisted. Several entries may share a `name`; they then share the same
    lock and the same stats record.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(..., description="Generated identifier, unique within the registry")
    name: str = Field(..., description="Logical job name, the lock and stats keys derive from it")
    pattern: str = Field(..., description="Cron pattern handed to the trigger source")
    task: Any = Field(..., description="The JobTask executed on each acquired tick")
    options: Dict[str, Any] = Field(default_factory=dict, description="Passed through to the task and the trigger source")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(ZoneInfo("UTC")),
        description="Creation timestamp with UTC timezone",
        frozen=True,
    )
    last_run: Optional[datetime] = None
    run_count: int = 0
    subscription: Any = Field(default=None, exclude=True, description="Trigger subscription firing this job")

    @property
    def is_running(self) -> bool:
        return bool(self.subscription is not None and self.subscription.is_running)

    def mark_run(self, when: Optional[datetime] = None) -> None:
        """
        Record one execution this instance actually performed.
        """
        self.last_run = when or datetime.now(ZoneInfo("UTC"))
        self.run_count += 1

    def info(self) -> "JobInfo":
        return JobInfo(
            id=self.id,
            name=self.name,
            pattern=self.pattern,
            created_at=self.created_at,
            last_run=self.last_run,
            run_count=self.run_count,
            is_running=self.is_running,
        )


class JobInfo(BaseModel):
    """
    Read-only snapshot of a JobEntry, as returned by `CronSync.list_jobs`.
    """
    id: str
    name: str
    pattern: str
    created_at: datetime
    last_run: Optional[datetime] = None
    run_count: int = 0
    is_running: bool = False
