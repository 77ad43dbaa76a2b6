"""
ResilientFetcher - async HTTP GET with a deadline and failure classification.

Every failure is returned as a FetchOutcome; nothing raises across the
fetch boundary. Retries and fallbacks are left to the caller.
"""

import asyncio
import json
from functools import lru_cache
from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from catalog.services.errors import FailureReason, FetchOutcome
from catalog.settings import global_settings

T = TypeVar("T")


@lru_cache(maxsize=32)
def _adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing ``]`` or ``}``."""
    out: list[str] = []
    pending_comma: list[str] = []
    in_string = False
    escaped = False

    for char in text:
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if pending_comma:
            if char.isspace():
                pending_comma.append(char)
                continue
            if char in "]}":
                # keep the whitespace, lose the comma
                out.extend(pending_comma[1:])
            else:
                out.extend(pending_comma)
            pending_comma = []

        if char == ",":
            pending_comma = [char]
        elif char == '"':
            in_string = True
            out.append(char)
        else:
            out.append(char)

    out.extend(pending_comma)
    return "".join(out)


def decode_json(body: str, model: Any) -> Any:
    """
    Decode a JSON body into ``model``.

    Raises:
        ValueError: If the body is not JSON
        ValidationError: If the JSON does not match ``model``
    """
    data = json.loads(strip_trailing_commas(body))
    if data is None:
        return None
    return _adapter(model).validate_python(data)


class ResilientFetcher:
    """
    Deadline-bounded GET that classifies failures instead of raising them.

    Usage:
        async with ResilientFetcher(base_url="http://localhost:8000") as fetcher:
            outcome = await fetcher.fetch("/api/products", ProductsResponse)
            if outcome.ok:
                print(outcome.value.count)
            else:
                print(outcome.failure.reason, outcome.failure.message)
    """

    def __init__(
        self,
        base_url: str | None = None,
        default_timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url if base_url is not None else global_settings.api_base_url
        self._default_timeout = default_timeout or global_settings.fetch_timeout
        self._transport = transport
        self._owns_client = http_client is None

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = http_client

    @property
    def default_timeout(self) -> float:
        return self._default_timeout

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._default_timeout),
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http_client

    async def fetch(
        self,
        endpoint: str,
        model: Any,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> FetchOutcome[Any]:
        """
        GET ``endpoint`` and decode the body into ``model``.

        Args:
            endpoint: Path relative to the base URL, or an absolute URL
            model: Pydantic model or type the JSON body is validated against
            timeout: Deadline in seconds (defaults to the configured timeout)
            cancel_event: Setting this event ends the request early, like
                the deadline does

        Returns:
            FetchOutcome with the decoded value or a classified failure
        """
        req_timeout = timeout or self._default_timeout

        try:
            response = await self._execute_request(endpoint, req_timeout, cancel_event)
            if response is None:
                message = f"Request timed out after {req_timeout:g} seconds"
                logger.error(f"{message}: {endpoint}")
                return FetchOutcome.failed(FailureReason.TIMEOUT, message)

            if not response.is_success:
                message = f"Server returned {response.status_code}"
                logger.warning(f"{message}: {endpoint}")
                return FetchOutcome.failed(
                    FailureReason.SERVER_ERROR, message, status=response.status_code
                )

            body = response.text
            if not body.strip():
                return FetchOutcome.failed(
                    FailureReason.DECODE, "Server returned empty response"
                )

            value = decode_json(body, model)
            if value is None:
                return FetchOutcome.failed(
                    FailureReason.DECODE, "Failed to deserialize response"
                )

            return FetchOutcome.success(value)

        except httpx.TimeoutException:
            message = f"Request timed out after {req_timeout:g} seconds"
            logger.error(f"{message}: {endpoint}")
            return FetchOutcome.failed(FailureReason.TIMEOUT, message)

        except httpx.RequestError as e:
            message = f"Network error: {e}"
            logger.error(f"{message} ({endpoint})")
            return FetchOutcome.failed(FailureReason.TRANSPORT, message)

        except (ValueError, ValidationError) as e:
            message = f"JSON error: {e}"
            logger.error(f"{message} ({endpoint})")
            return FetchOutcome.failed(FailureReason.DECODE, message)

        except Exception as e:
            message = f"Unexpected error: {e}"
            logger.exception(f"{message} ({endpoint})")
            return FetchOutcome.failed(FailureReason.UNKNOWN, message)

    async def _execute_request(
        self,
        endpoint: str,
        timeout: float,
        cancel_event: asyncio.Event | None,
    ) -> httpx.Response | None:
        """
        Run the GET until it completes, the deadline passes, or the caller
        cancels. Returns None when the request was abandoned.
        """
        client = await self._get_http_client()
        request_task = asyncio.create_task(client.get(endpoint, timeout=timeout))
        waiters: set[asyncio.Future[Any]] = {request_task}
        cancel_task: asyncio.Task[Any] | None = None
        if cancel_event is not None:
            cancel_task = asyncio.create_task(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if cancel_task is not None:
                cancel_task.cancel()
            if not request_task.done():
                # Late responses are dropped with the task
                request_task.cancel()

        if request_task not in done:
            return None
        return request_task.result()

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
        self._http_client = None
        logger.debug("ResilientFetcher closed")

    async def __aenter__(self) -> "ResilientFetcher":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
