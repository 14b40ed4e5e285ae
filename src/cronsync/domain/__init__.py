from .job import JobEntry, JobInfo, new_job_id
from .outcome import ExecutionOutcome, OutcomeStatus
from .stats import JobStats, RunStatus

__all__ = ["JobEntry", "JobInfo", "new_job_id", "ExecutionOutcome", "OutcomeStatus", "JobStats", "RunStatus"]
