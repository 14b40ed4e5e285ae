import inspect
from typing import Any, Callable, Dict, Protocol, runtime_checkable


@runtime_checkable
class JobTask(Protocol):
    """
    Protocol class for the work a job performs on each tick it wins.
    """

    async def async_execute(self, options: Dict[str, Any]) -> Any:
        """
        Asynchronously run the task.

        Args:
            options (Dict[str, Any]): The options bag the job was scheduled with.

        Returns:
            Any: The task result. Raising marks the run as failed.
        """
        ...


class FunctionTask:
    """
    Adapts a plain callable into a JobTask.

    The callable is invoked without arguments; if it returns an awaitable, the
    awaitable is awaited.
    """

    def __init__(self, func: Callable[[], Any]):
        self.func = func

    async def async_execute(self, options: Dict[str, Any]) -> Any:
        result = self.func()
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"FunctionTask({getattr(self.func, '__qualname__', self.func)!r})"


def as_task(task: Any) -> JobTask:
    if isinstance(task, JobTask):
        return task
    if callable(task):
        return FunctionTask(task)
    raise TypeError(f"Expected a JobTask or a callable, got {type(task).__name__}")
