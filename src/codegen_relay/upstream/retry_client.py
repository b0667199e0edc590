"""HTTP POST with exponential backoff for chat-completion upstreams.

Retry rules, per attempt ``i`` (0-based) of ``policy.max_attempts``:
- transport failure: sleep ``base_delay_ms * 2**i`` and retry, raise on the last attempt
- unsupported URL scheme: raise at once
- HTTP 429: sleep and retry; if no attempt is left, raise RetryExhaustedError
- 2xx: return the response
- anything else: raise UpstreamStatusError without retrying
"""
from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from codegen_relay.common.errors import RetryExhaustedError, TransportError, UpstreamStatusError
from codegen_relay.common.schema import RequestSpec, RetryPolicy

LOGGER = logging.getLogger("codegen_relay.upstream.retry")

Sleep = Callable[[float], Awaitable[None]]


class RetryingHttpClient:
    """Issues one upstream request at a time, retrying transient failures.

    Every attempt opens its own ``httpx.AsyncClient`` so concurrent requests
    share nothing. ``transport`` and ``sleep`` exist for tests.
    """

    def __init__(
        self,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.timeout = timeout
        self.transport = transport
        self._sleep = sleep

    async def call(
        self,
        url: str,
        spec: RequestSpec,
        policy: RetryPolicy,
        upstream: str = "Upstream",
    ) -> httpx.Response:
        last = policy.max_attempts - 1
        for attempt in range(policy.max_attempts):
            try:
                resp = await self._send(url, spec)
            except httpx.UnsupportedProtocol as e:
                LOGGER.error("%s URL %s has no usable scheme; not retrying", upstream, url)
                raise TransportError(upstream, attempt + 1, e) from e
            except httpx.TransportError as e:
                if attempt == last:
                    LOGGER.error("%s request failed on final attempt %d/%d: %s",
                                 upstream, attempt + 1, policy.max_attempts, e)
                    raise TransportError(upstream, policy.max_attempts, e) from e
                delay = policy.delay_ms(attempt)
                LOGGER.warning("%s request failed (%s); attempt %d/%d, retrying in %dms",
                               upstream, e, attempt + 1, policy.max_attempts, delay)
                await self._sleep(delay / 1000)
                continue

            if resp.status_code == 429:
                if attempt == last:
                    break
                delay = policy.delay_ms(attempt)
                LOGGER.warning("%s rate limited (429); attempt %d/%d, retrying in %dms",
                               upstream, attempt + 1, policy.max_attempts, delay)
                await self._sleep(delay / 1000)
                continue

            if resp.is_success:
                return resp

            LOGGER.error("%s returned %d on attempt %d/%d; not retrying",
                         upstream, resp.status_code, attempt + 1, policy.max_attempts)
            raise UpstreamStatusError(upstream, resp.status_code, resp.reason_phrase)

        LOGGER.error("%s still rate limited after %d attempt(s)", upstream, policy.max_attempts)
        raise RetryExhaustedError(upstream, policy.max_attempts)

    async def _send(self, url: str, spec: RequestSpec) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.request(spec.method, url, headers=spec.headers, json=spec.json)
