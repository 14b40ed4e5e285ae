from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class OutcomeStatus(str, Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ExecutionOutcome(BaseModel):
    """
    Result of one attempt to run a job.

    SKIPPED means another owner held the lock; nothing was executed or
    recorded. SUCCEEDED and FAILED mean this instance ran the task.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: OutcomeStatus
    name: str
    token: str
    result: Optional[Any] = None
    error: Optional[BaseException] = None
    duration_ms: Optional[int] = None

    @property
    def ran(self) -> bool:
        return self.status != OutcomeStatus.SKIPPED

    @property
    def skipped(self) -> bool:
        return self.status == OutcomeStatus.SKIPPED

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED

    @classmethod
    def skip(cls, name: str, token: str) -> "ExecutionOutcome":
        return cls(status=OutcomeStatus.SKIPPED, name=name, token=token)
