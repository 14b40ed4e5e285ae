from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field


class RunStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class JobStats(BaseModel):
    """
    Latest execution result for a job name, shared by all instances.

    Stored as the Redis hash ``stats:<name>`` with the camelCase field names
    below; only the most recent run is kept.
    """
    last_run: Optional[datetime] = Field(None, description="When the run finished")
    duration: Optional[int] = Field(None, description="Run time in milliseconds, successful runs only")
    status: Optional[RunStatus] = None
    instance_id: Optional[str] = Field(None, description="Instance that executed the run")
    error: Optional[str] = Field(None, description="Error message, failed runs only")

    @property
    def is_empty(self) -> bool:
        return self.last_run is None and self.status is None

    def to_hash(self) -> Dict[str, str]:
        fields: Dict[str, str] = {}
        if self.last_run is not None:
            fields["lastRun"] = self.last_run.isoformat()
        if self.duration is not None:
            fields["duration"] = str(self.duration)
        if self.status is not None:
            fields["status"] = self.status.value
        if self.instance_id is not None:
            fields["instanceId"] = self.instance_id
        if self.error is not None:
            fields["error"] = self.error
        return fields

    @classmethod
    def from_hash(cls, data: Dict[str, str]) -> "JobStats":
        """
        Build from an HGETALL reply. An empty reply yields an empty record.
        """
        duration = data.get("duration")
        return cls(
            last_run=data.get("lastRun"),
            duration=int(duration) if duration not in (None, "") else None,
            status=data.get("status"),
            instance_id=data.get("instanceId"),
            error=data.get("error"),
        )
