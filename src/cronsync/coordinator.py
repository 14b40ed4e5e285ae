"""
Execution coordinator: every tick of every job goes through `attempt_run`.

The lock for the job name is taken first; when another owner holds it the
attempt is skipped without side effects. Otherwise the task runs, its outcome
is written to the stats store, and the lock is released on every exit path.

The lock is not renewed while the task runs. If the task outlives the lock TTL
the key expires and another instance may start the same job concurrently; the
late release of the first owner then deletes nothing because the token no
longer matches.
"""

import asyncio
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from zoneinfo import ZoneInfo

from cronsync.domain.outcome import ExecutionOutcome, OutcomeStatus
from cronsync.domain.stats import JobStats, RunStatus
from cronsync.executors.protocol import JobTask
from cronsync.locks.protocol import DistributedLock
from cronsync.logging_utils import get_logger
from cronsync.storages.protocol import StatsStore

logger = get_logger("coordinator")


class ExecutionCoordinator:
    def __init__(self, lock: DistributedLock, stats: StatsStore, instance_id: str):
        self.lock: DistributedLock = lock
        self.stats: StatsStore = stats
        self.instance_id: str = instance_id

    async def attempt_run(
        self,
        name: str,
        token: str,
        ttl: int,
        task: JobTask,
        options: Optional[Dict[str, Any]] = None,
        on_ran: Optional[Callable[[], None]] = None,
    ) -> ExecutionOutcome:
        """
        Run `task` for job `name` if this attempt wins the lock.

        Args:
            name (str): Job name; selects the lock and the stats record.
            token (str): Owner token, unique to this attempt.
            ttl (int): Lock expiry in milliseconds.
            task (JobTask): The work to run.
            options (Dict[str, Any]): Passed through to the task.
            on_ran: Called once the task has returned or raised, before the
                stats write, so a later store failure cannot lose the run.

        Returns:
            ExecutionOutcome: SKIPPED, SUCCEEDED with the result, or FAILED
            with the task's exception. A task failure is returned, not raised.

        Raises:
            LockStoreUnavailable: If Redis cannot be reached for the acquire,
                the stats write or the release.
        """
        async with self.lock.held(name, token, ttl) as acquired:
            if not acquired:
                logger.debug(f"Lock not acquired for job: {name}", extra={"token": token})
                return ExecutionOutcome.skip(name, token)

            logger.info(f"Executing job: {name} on instance: {self.instance_id}", extra={"token": token})
            start_time = time.monotonic()
            try:
                result = await task.async_execute(options or {})
            except asyncio.CancelledError:
                logger.warning(f"Job cancelled: {name}")
                raise
            except Exception as e:
                logger.error(f"Job failed: {name}: {e}", exc_info=True)
                if on_ran is not None:
                    on_ran()
                await self.stats.record(name, JobStats(
                    last_run=datetime.now(ZoneInfo("UTC")),
                    status=RunStatus.ERROR,
                    instance_id=self.instance_id,
                    error=str(e),
                ))
                return ExecutionOutcome(status=OutcomeStatus.FAILED, name=name, token=token, error=e)

            duration = int((time.monotonic() - start_time) * 1000)
            if on_ran is not None:
                on_ran()
            await self.stats.record(name, JobStats(
                last_run=datetime.now(ZoneInfo("UTC")),
                duration=duration,
                status=RunStatus.SUCCESS,
                instance_id=self.instance_id,
            ))
            logger.info(f"Job completed: {name} ({duration}ms)", extra={"duration": duration})
            return ExecutionOutcome(
                status=OutcomeStatus.SUCCEEDED, name=name, token=token, result=result, duration_ms=duration
            )
