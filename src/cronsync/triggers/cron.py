import asyncio
from datetime import datetime
from typing import Any, Dict, Optional, Set
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter

from cronsync.logging_utils import get_logger
from cronsync.triggers.protocol import TickCallback

logger = get_logger("triggers")


class CronSubscription:
    """
    Fires a callback at every instant matching a cron pattern, using asyncio.

    Each firing runs the callback in its own asyncio task, so a slow callback
    does not delay the next tick and two firings of the same subscription may
    overlap. Exceptions raised by a callback are logged; the timer keeps going.
    """

    def __init__(self, pattern: str, callback: TickCallback, tz: ZoneInfo):
        self.pattern: str = pattern
        self.callback: TickCallback = callback
        self.tz: ZoneInfo = tz
        self.timer_task: Optional[asyncio.Task] = None
        self.in_flight: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self.timer_task is not None and not self.timer_task.done()

    def next_fire_time(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now(self.tz)
        cron = croniter(self.pattern, now, second_at_beginning=True)
        return cron.get_next(datetime)

    def start(self) -> None:
        if not self.is_running:
            self.timer_task = asyncio.create_task(self._timer_loop())

    def stop(self) -> None:
        if self.timer_task and not self.timer_task.done():
            self.timer_task.cancel()
        self.timer_task = None

    async def _timer_loop(self):
        try:
            next_fire = self.next_fire_time()
            while True:
                delay = (next_fire - datetime.now(self.tz)).total_seconds()
                if delay > 0:
                    await asyncio.sleep(delay)
                self._fire()
                next_fire = self.next_fire_time(next_fire)
        except asyncio.CancelledError:
            pass

    def _fire(self):
        task = asyncio.create_task(self._run_callback())
        self.in_flight.add(task)
        task.add_done_callback(self.in_flight.discard)

    async def _run_callback(self):
        try:
            await self.callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Tick callback failed for pattern {self.pattern}: {e}", exc_info=True)


class CronTrigger:
    """
    Trigger source for cron patterns, backed by croniter.

    Accepts the standard five fields and a six field form whose first field is
    seconds. The ``timezone`` option of a job selects the zone the pattern is
    evaluated in (UTC by default).
    """

    def validate(self, pattern: str) -> bool:
        if not isinstance(pattern, str) or not pattern.strip():
            return False
        if len(pattern.split()) not in (5, 6):
            return False
        return croniter.is_valid(pattern, second_at_beginning=True)

    def subscribe(
        self, pattern: str, callback: TickCallback, options: Optional[Dict[str, Any]] = None
    ) -> CronSubscription:
        tz_name = (options or {}).get("timezone", "UTC")
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {tz_name}") from e
        return CronSubscription(pattern, callback, tz)
