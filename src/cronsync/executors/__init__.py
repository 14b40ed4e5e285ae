from .protocol import JobTask, FunctionTask, as_task
from .http import HttpTask, HttpCallPayload

__all__ = ["JobTask", "FunctionTask", "as_task", "HttpTask", "HttpCallPayload"]
