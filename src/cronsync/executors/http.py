from typing import Any, Dict, Optional

import aiohttp
from pydantic import BaseModel, Field


class HttpCallPayload(BaseModel):
    url: str = Field(..., description="The URL to make the HTTP request to")
    method: str = Field("GET", description="The HTTP method to use (e.g. GET, POST, PUT, DELETE)")
    headers: Dict[str, str] = Field(default={}, description="Optional headers to include in the request")
    body: Optional[Dict[str, Any]] = Field(default=None, description="Optional JSON body for the request")
    params: Dict[str, str] = Field(default={}, description="Optional query parameters for the request")


class HttpTask:
    """
    Job task that makes one HTTP request using aiohttp.

    A transport error or a response status of 400 or above raises, which the
    coordinator records as a failed run.
    """

    def __init__(self, payload: HttpCallPayload):
        self.payload: HttpCallPayload = payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HttpTask":
        return cls(HttpCallPayload.model_validate(data))

    async def async_execute(self, options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Perform the request.

        Args:
            options (Dict[str, Any]): The job's options. ``timeout`` (seconds)
                bounds the whole request when present.

        Returns:
            Dict[str, Any]: ``status``, ``headers`` and ``body`` of the response.
        """
        timeout = aiohttp.ClientTimeout(total=options.get("timeout"))
        payload = self.payload

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(
                method=payload.method,
                url=payload.url,
                headers=payload.headers,
                params=payload.params,
                json=payload.body
            ) as response:
                response.raise_for_status()
                return {
                    "status": response.status,
                    "headers": dict(response.headers),
                    "body": await response.text()
                }

    def __repr__(self) -> str:
        return f"HttpTask({self.payload.method} {self.payload.url})"
