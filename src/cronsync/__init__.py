"""
Distributed Cron Scheduling

This package lets several identical worker instances share one cron schedule
while making sure each tick of a job runs on at most one of them.

Core Concepts:

Job:
    A named piece of work scheduled with a cron pattern on one instance.
    Every instance that schedules the same job name competes for the same
    lock and writes the same stats record.

Lock:
    A Redis key ``lock:<name>`` holding the token of the attempt that owns it.
    It expires after the configured lock timeout and can only be deleted by
    its owner.

Stats:
    The latest execution result of a job name, stored in the Redis hash
    ``stats:<name>`` and visible to every instance.

Relationships:
    - Each tick of each job is one attempt: acquire the lock, run the task,
      record the stats, release the lock.
    - An attempt that finds the lock taken is skipped.
"""

from .config import CronSyncSettings
from .domain import ExecutionOutcome, JobInfo, JobStats, OutcomeStatus, RunStatus
from .exceptions import (
    CronSyncError,
    InvalidPatternError,
    JobNotFoundError,
    LockStoreUnavailable,
    TaskExecutionError,
)
from .executors import FunctionTask, HttpCallPayload, HttpTask, JobTask
from .scheduler import CronSync

__all__ = [
    "CronSync",
    "CronSyncSettings",
    "ExecutionOutcome",
    "JobInfo",
    "JobStats",
    "OutcomeStatus",
    "RunStatus",
    "CronSyncError",
    "InvalidPatternError",
    "JobNotFoundError",
    "LockStoreUnavailable",
    "TaskExecutionError",
    "JobTask",
    "FunctionTask",
    "HttpTask",
    "HttpCallPayload",
]
