import time
from typing import Any, Dict, List, Optional, Set

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from cronsync.locks.redis import RELEASE_SCRIPT
from cronsync.scheduler import CronSync
from cronsync.triggers.cron import CronTrigger


class FakeRedis:
    """
    In-memory stand-in for the subset of redis.asyncio.Redis cronsync uses.

    Keys set with `px` expire on the monotonic clock. Every command is appended
    to `calls`; setting `down` makes every command fail as if the server were
    unreachable, and `fail_commands` does the same for selected commands only.
    """

    def __init__(self):
        self.strings: Dict[str, str] = {}
        self.expires: Dict[str, float] = {}
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.calls: List[str] = []
        self.down: bool = False
        self.fail_commands: Set[str] = set()
        self.closed: bool = False

    def _command(self, name: str) -> None:
        self.calls.append(name)
        if self.down or name in self.fail_commands:
            raise RedisConnectionError(f"Error connecting to fake redis ({name})")

    def _purge(self, key: str) -> None:
        deadline = self.expires.get(key)
        if deadline is not None and time.monotonic() >= deadline:
            self.strings.pop(key, None)
            self.expires.pop(key, None)

    def pttl(self, key: str) -> Optional[float]:
        self._purge(key)
        deadline = self.expires.get(key)
        if deadline is None:
            return None
        return (deadline - time.monotonic()) * 1000

    async def ping(self) -> bool:
        self._command("ping")
        return True

    async def set(self, key: str, value: str, px: Optional[int] = None, nx: bool = False) -> Optional[bool]:
        self._command("set")
        self._purge(key)
        if nx and key in self.strings:
            return None
        self.strings[key] = value
        if px is not None:
            self.expires[key] = time.monotonic() + px / 1000
        else:
            self.expires.pop(key, None)
        return True

    async def get(self, key: str) -> Optional[str]:
        self._command("get")
        self._purge(key)
        return self.strings.get(key)

    async def exists(self, *keys: str) -> int:
        self._command("exists")
        count = 0
        for key in keys:
            self._purge(key)
            if key in self.strings or key in self.hashes:
                count += 1
        return count

    async def eval(self, script: str, numkeys: int, *args: Any) -> int:
        self._command("eval")
        assert script == RELEASE_SCRIPT, "only the lock release script is supported"
        keys, argv = args[:numkeys], args[numkeys:]
        key, token = keys[0], argv[0]
        self._purge(key)
        if self.strings.get(key) == token:
            del self.strings[key]
            self.expires.pop(key, None)
            return 1
        return 0

    async def hset(self, key: str, mapping: Dict[str, str]) -> int:
        self._command("hset")
        return self._hset(key, mapping)

    def _hset(self, key: str, mapping: Dict[str, str]) -> int:
        current = self.hashes.setdefault(key, {})
        added = len([field for field in mapping if field not in current])
        current.update({field: str(value) for field, value in mapping.items()})
        return added

    def _hdel(self, key: str, *fields: str) -> int:
        current = self.hashes.get(key, {})
        removed = 0
        for field in fields:
            if current.pop(field, None) is not None:
                removed += 1
        if key in self.hashes and not current:
            del self.hashes[key]
        return removed

    async def hgetall(self, key: str) -> Dict[str, str]:
        self._command("hgetall")
        return dict(self.hashes.get(key, {}))

    def pipeline(self, transaction: bool = True) -> "FakePipeline":
        return FakePipeline(self)

    async def aclose(self) -> None:
        self._command("aclose")
        self.closed = True


class FakePipeline:
    def __init__(self, redis: FakeRedis):
        self.redis = redis
        self.queued: List[Any] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.queued.clear()

    def hset(self, key: str, mapping: Dict[str, str]) -> "FakePipeline":
        self.queued.append(("hset", key, mapping))
        return self

    def hdel(self, key: str, *fields: str) -> "FakePipeline":
        self.queued.append(("hdel", key, fields))
        return self

    async def execute(self) -> List[int]:
        self.redis._command("exec")
        results = []
        for command, key, arg in self.queued:
            if command == "hset":
                results.append(self.redis._hset(key, arg))
            else:
                results.append(self.redis._hdel(key, *arg))
        self.queued.clear()
        return results


class ManualSubscription:
    def __init__(self, pattern: str, callback, options: Dict[str, Any]):
        self.pattern = pattern
        self.callback = callback
        self.options = options
        self.running = False
        self.fired = 0

    @property
    def is_running(self) -> bool:
        return self.running

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    async def fire(self):
        """Simulate a tick; a stopped subscription does not fire."""
        if not self.running:
            return None
        self.fired += 1
        return await self.callback()


class ManualTrigger:
    """Trigger source whose ticks are fired explicitly by the test."""

    def __init__(self):
        self.subscriptions: List[ManualSubscription] = []
        self.validated: List[str] = []

    def validate(self, pattern: str) -> bool:
        self.validated.append(pattern)
        return CronTrigger().validate(pattern)

    def subscribe(self, pattern: str, callback, options: Optional[Dict[str, Any]] = None) -> ManualSubscription:
        subscription = ManualSubscription(pattern, callback, options or {})
        self.subscriptions.append(subscription)
        return subscription


@pytest.fixture(scope="function")
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(scope="function")
def manual_trigger() -> ManualTrigger:
    return ManualTrigger()


@pytest_asyncio.fixture(scope="function")
async def cron(fake_redis: FakeRedis, manual_trigger: ManualTrigger):
    cron = CronSync(redis=fake_redis, trigger=manual_trigger, instance_id="instance-a", lock_timeout=5000)
    await cron.connect()
    yield cron
    await cron.disconnect()
