"""Retrying HTTP primitive used for every call to the Alice Blue API."""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from core.logging import get_logger
from core.monitoring.prometheus_metrics import AliceMetricsCollector
from .exceptions import FetchError, TransientNetworkError, UpstreamStatusError
from .models import RetryPolicy

logger = get_logger(__name__, component="alice_fetcher")

SleepFunc = Callable[[float], Awaitable[Any]]


class ResilientFetcher:
    """
    Issues HTTP requests with bounded retries and exponential backoff.

    Every call opens its own ``httpx.AsyncClient``, so a fetcher holds no
    connection state and can be shared by concurrent callers. Cancellation
    of the calling task propagates through both the request and the
    backoff sleep.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunc = asyncio.sleep,
        metrics: Optional[AliceMetricsCollector] = None,
    ):
        self.timeout = timeout
        self.policy = policy or RetryPolicy()
        self._transport = transport
        self._sleep = sleep
        self._metrics = metrics

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        content: Optional[str] = None,
        json: Any = None,
        policy: Optional[RetryPolicy] = None,
    ) -> httpx.Response:
        """
        Execute the request, retrying failures per ``policy``.

        Returns the first 2xx response. Raises UpstreamStatusError for a
        final non-2xx status and TransientNetworkError for a final
        transport failure.
        """
        policy = policy or self.policy
        method = method.upper()
        attempt = 0

        while True:
            try:
                response = await self._send(method, url, headers, content, json)
            except httpx.TransportError as exc:
                error: FetchError = TransientNetworkError(
                    f"{type(exc).__name__}: {exc}",
                    retry_count=attempt,
                    max_retries=policy.max_attempts,
                )
                error.__cause__ = exc
                self._record_attempt(method, "network_error")
            else:
                if response.is_success:
                    self._record_attempt(method, "success")
                    return response
                error = UpstreamStatusError(
                    response.status_code,
                    response.text,
                    retry_count=attempt,
                    max_retries=policy.max_attempts,
                )
                self._record_attempt(method, "http_error")
                if response.status_code in policy.non_retryable_statuses:
                    logger.warning("Non-retryable broker response",
                                   url=url, method=method, status_code=response.status_code)
                    raise error

            if attempt >= policy.max_attempts:
                logger.error("Broker request failed after retries",
                             url=url, method=method, attempts=attempt + 1,
                             status_code=error.status_code, error=error.message)
                raise error

            delay = policy.delay_for(attempt)
            logger.warning("Broker request failed, retrying",
                           url=url, method=method, attempt=attempt,
                           delay_seconds=delay, error=error.message)
            if self._metrics:
                self._metrics.record_retry(method)
            await self._sleep(delay)
            attempt += 1

    async def _send(self, method: str, url: str, headers, content, json) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            return await client.request(method, url, headers=headers, content=content, json=json)

    def _record_attempt(self, method: str, outcome: str) -> None:
        if self._metrics:
            self._metrics.record_attempt(method, outcome)


def read_json(response: httpx.Response) -> Any:
    """Parse a JSON body; unparseable bodies are treated as an empty object."""
    try:
        return response.json()
    except ValueError:
        logger.warning("Broker response is not valid JSON",
                       status_code=response.status_code,
                       body_length=len(response.content))
        return {}
