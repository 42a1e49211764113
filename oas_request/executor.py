"""Executor - Sends built requests to a target with httpx.

Usage:
    with Executor("http://localhost:8000") as executor:
        response = executor.submit(request)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from oas_request.models import Request

logger = logging.getLogger(__name__)


class ExecutorError(Exception):
    """Base class for executor errors."""


class RequestError(ExecutorError):
    """Raised when a request fails (connection error, timeout, etc.)."""


def _sanitize_header_value(value: str) -> str:
    """Replace non-ASCII characters, which HTTP headers cannot carry, with '?'."""
    return value.encode("ascii", errors="replace").decode("ascii")


class Executor:
    """Submits Request objects against one base URL."""

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            base_url: Scheme and host the request path is appended to.
            headers: Headers sent with every request; request headers win.
            timeout: Timeout in seconds for each request.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        kwargs: dict[str, Any] = {
            "base_url": base_url,
            "headers": headers or {},
            "timeout": timeout,
        }
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.Client(**kwargs)

    def __enter__(self) -> "Executor":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def submit(self, request: Request) -> httpx.Response:
        """Send the request.

        Mapping payloads are sent as form data, string payloads as the raw
        body.

        Raises:
            RequestError: If the request fails due to connection/timeout.
        """
        kwargs: dict[str, Any] = {
            "headers": {k: _sanitize_header_value(v) for k, v in request.headers.items()},
        }
        if isinstance(request.payload, dict):
            kwargs["data"] = request.payload
        elif request.payload is not None:
            kwargs["content"] = request.payload.encode("utf-8")

        logger.debug("Submitting %s %s", request.verb.upper(), request.path)
        try:
            return self._client.request(request.verb.upper(), request.path, **kwargs)
        except httpx.TimeoutException as e:
            raise RequestError(f"Request to {request.path} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise RequestError(f"Request to {request.path} failed: {e}") from e
