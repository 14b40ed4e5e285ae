from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

TickCallback = Callable[[], Awaitable[Any]]


class Subscription(Protocol):
    """
    Handle for one callback registered with a trigger source.
    """

    @property
    def is_running(self) -> bool:
        ...

    def start(self) -> None:
        """Begin firing the callback at matching instants."""
        ...

    def stop(self) -> None:
        """Stop future firings. Callbacks already running are left to finish."""
        ...


class TriggerSource(Protocol):
    def validate(self, pattern: str) -> bool:
        """Return whether `pattern` is a schedule this source understands."""
        ...

    def subscribe(
        self, pattern: str, callback: TickCallback, options: Optional[Dict[str, Any]] = None
    ) -> Subscription:
        """Create a stopped subscription firing `callback` at every instant matching `pattern`."""
        ...
