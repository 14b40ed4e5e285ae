from typing import Optional


class CronSyncError(Exception):
    """
    Base class for every error raised by cronsync.
    """


class InvalidPatternError(CronSyncError, ValueError):
    """
    Raised by `CronSync.schedule` when the trigger source rejects a pattern.
    Nothing has been registered or contacted when this is raised.
    """

    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"Invalid cron pattern: {pattern}")


class JobNotFoundError(CronSyncError, KeyError):
    """
    Raised when a job id is not present in the local registry.
    """

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class LockStoreUnavailable(CronSyncError):
    """
    The Redis store could not be reached or timed out.

    This is never treated as "lock not acquired": the attempt that hit it fails.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"Lock store unavailable during {operation}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class TaskExecutionError(CronSyncError):
    """
    The task of a job failed. Raised after the failure has been recorded in the
    stats store and the lock has been released; the task's exception is chained
    as `__cause__`.
    """

    def __init__(self, job_name: str, cause: BaseException):
        self.job_name = job_name
        self.cause = cause
        super().__init__(f"Job failed: {job_name}: {cause}")
