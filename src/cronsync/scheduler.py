import asyncio
import uuid
from contextvars import ContextVar
from typing import Any, Dict, List, Optional, Set

from redis.asyncio import Redis

from cronsync.client import connect_store, ping, store_errors
from cronsync.config import CronSyncSettings
from cronsync.coordinator import ExecutionCoordinator
from cronsync.domain.job import JobEntry, JobInfo, new_job_id
from cronsync.domain.outcome import ExecutionOutcome
from cronsync.domain.stats import JobStats
from cronsync.exceptions import CronSyncError, InvalidPatternError, JobNotFoundError, TaskExecutionError
from cronsync.executors.protocol import as_task
from cronsync.locks.redis import RedisLock
from cronsync.logging_utils import get_logger, setup_logging
from cronsync.registry import JobRegistry
from cronsync.storages.redis import RedisStatsStore
from cronsync.triggers.cron import CronTrigger
from cronsync.triggers.protocol import TriggerSource

logger = get_logger("scheduler")

# Set while a run is executing, so disconnect() called from inside a task
# does not wait for its own run
_current_run: ContextVar[Optional[asyncio.Future]] = ContextVar("cronsync_current_run", default=None)


class CronSync:
    """
    Distributed cron scheduler.

    Every instance runs the same schedule and fires its own timers; a Redis
    lock per job name makes sure only one instance executes a given tick. The
    latest result per job name is kept in Redis and shared by all instances.

    Usage:
        async with CronSync(redis_url="redis://localhost:6379") as cron:
            job_id = await cron.schedule("*/5 * * * *", "backup", run_backup)
            ...
    """

    def __init__(
        self,
        settings: Optional[CronSyncSettings] = None,
        *,
        redis: Optional[Redis] = None,
        trigger: Optional[TriggerSource] = None,
        configure_logging: bool = False,
        **overrides: Any,
    ):
        if settings is None:
            settings = CronSyncSettings(**overrides)
        elif overrides:
            settings = CronSyncSettings(**{**settings.model_dump(), **overrides})
        self.settings: CronSyncSettings = settings
        if configure_logging:
            setup_logging(settings.log_level, settings.log_file, settings.log_json)
        self.instance_id: str = self.settings.instance_id
        self.lock_timeout: int = self.settings.lock_timeout
        self.trigger: TriggerSource = trigger or CronTrigger()
        self.jobs: JobRegistry = JobRegistry()
        self.redis: Optional[Redis] = redis
        self.coordinator: Optional[ExecutionCoordinator] = None
        self.stats: Optional[RedisStatsStore] = None
        self.in_flight: Set[asyncio.Future] = set()

    async def __aenter__(self) -> "CronSync":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    @property
    def is_connected(self) -> bool:
        return self.coordinator is not None

    async def connect(self) -> None:
        """
        Open (or check) the Redis connection and build the lock, stats store
        and coordinator on top of it.

        Raises:
            LockStoreUnavailable: If Redis does not answer. The instance cannot
                run jobs without it.
        """
        if self.is_connected:
            return
        if self.redis is None:
            self.redis = await connect_store(self.settings)
        else:
            await ping(self.redis)

        prefix = self.settings.key_prefix
        self.stats = RedisStatsStore(self.redis, prefix)
        self.coordinator = ExecutionCoordinator(RedisLock(self.redis, prefix), self.stats, self.instance_id)
        logger.info(f"CronSync initialized with instance ID: {self.instance_id}")

    def _require_coordinator(self) -> ExecutionCoordinator:
        if self.coordinator is None:
            raise CronSyncError("CronSync is not connected; call connect() first")
        return self.coordinator

    def new_token(self) -> str:
        return f"{self.instance_id}:{uuid.uuid4().hex}"

    async def schedule(
        self, pattern: str, name: str, task: Any, options: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Schedule `task` under job `name` at every instant matching `pattern`.

        Args:
            pattern (str): Cron pattern, five fields or six with leading seconds.
            name (str): Job name. Entries sharing a name share one lock and one
                stats record, on this instance and on every other.
            task: A JobTask, or a callable (sync or async) taking no arguments.
            options (Dict[str, Any]): Passed through to the task and the trigger.

        Returns:
            str: The generated job id.

        Raises:
            InvalidPatternError: If the trigger source rejects `pattern`.
            CronSyncError: If the instance is not connected.
        """
        if not self.trigger.validate(pattern):
            raise InvalidPatternError(pattern)
        self._require_coordinator()

        options = dict(options or {})
        entry = JobEntry(
            id=new_job_id(name),
            name=name,
            pattern=pattern,
            task=as_task(task),
            options=options,
        )

        async def on_tick() -> ExecutionOutcome:
            return await self._run_entry(entry)

        entry.subscription = self.trigger.subscribe(pattern, on_tick, options)
        entry.subscription.start()
        self.jobs.put(entry)
        logger.info(f"Job scheduled: {name} ({pattern})", extra={"job_id": entry.id})
        return entry.id

    async def _run_entry(self, entry: JobEntry) -> ExecutionOutcome:
        coordinator = self._require_coordinator()
        run = asyncio.get_running_loop().create_future()
        self.in_flight.add(run)
        reset = _current_run.set(run)
        try:
            outcome = await coordinator.attempt_run(
                entry.name, self.new_token(), self.lock_timeout, entry.task, entry.options,
                on_ran=entry.mark_run,
            )
        finally:
            _current_run.reset(reset)
            self.in_flight.discard(run)
            run.set_result(None)
        if outcome.failed:
            raise TaskExecutionError(entry.name, outcome.error) from outcome.error
        return outcome

    async def run_now(self, job_id: str) -> ExecutionOutcome:
        """
        Make one attempt for a scheduled job right away, exactly as a tick would.

        Raises:
            JobNotFoundError: If `job_id` is not scheduled on this instance.
            TaskExecutionError: If this instance ran the task and it failed.
        """
        entry = self.jobs.get(job_id)
        if entry is None:
            raise JobNotFoundError(job_id)
        return await self._run_entry(entry)

    async def stop_job(self, job_id: str) -> None:
        """
        Stop future ticks of a job and forget it. A run already in progress
        finishes normally.
        """
        entry = self.jobs.get(job_id)
        if entry is None:
            raise JobNotFoundError(job_id)
        entry.subscription.stop()
        self.jobs.remove(job_id)
        logger.info(f"Job stopped: {entry.name}", extra={"job_id": job_id})

    async def stop_all(self) -> None:
        for entry in self.jobs.list():
            entry.subscription.stop()
            logger.info(f"Job stopped: {entry.name}", extra={"job_id": entry.id})
        self.jobs.clear()

    def list_jobs(self) -> List[JobInfo]:
        return [entry.info() for entry in self.jobs.list()]

    async def get_stats(self, name: str) -> JobStats:
        """
        Latest execution result of job `name` across all instances; an empty
        JobStats if it never ran.
        """
        self._require_coordinator()
        return await self.stats.get(name)

    async def disconnect(self) -> None:
        """
        Stop every job, wait for runs already in progress to record their
        stats and release their locks, then close the Redis connection. Safe
        to call more than once.
        """
        await self.stop_all()
        pending = [run for run in self.in_flight if run is not _current_run.get()]
        if pending:
            logger.info(f"Waiting for {len(pending)} running job(s) before disconnecting")
            await asyncio.wait(pending)
        redis, self.redis = self.redis, None
        self.coordinator = None
        self.stats = None
        if redis is not None:
            with store_errors("disconnect"):
                await redis.aclose()
        logger.info("CronSync disconnected")
