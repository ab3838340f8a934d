# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Asyncio readiness poller for callers embedding the wait in an event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from ..config import HttpSettings
from ..http.client import AsyncHttpClient, create_default_async_http_client
from ..http.models import HttpResponse
from ..http.url import validate_target_url
from ..models.poll import PollResult
from .engine import Clock, ProbeCallback, _PollerBase
from .policy import PollPolicy

AsyncSleep = Callable[[float], Awaitable[None]]


class AsyncReadinessPoller(_PollerBase):
    """
    Same contract as ReadinessPoller, but waits with ``asyncio.sleep``.

    Cancelling the task running ``wait`` propagates ``CancelledError`` as usual;
    setting ``cancel_event`` ends the wait with a CANCELLED result instead.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient | None = None,
        policy: PollPolicy | None = None,
        *,
        http_settings: HttpSettings | None = None,
        clock: Clock | None = None,
        sleep: AsyncSleep | None = None,
    ):
        super().__init__(policy, http_settings, clock)
        self.http_client = http_client or create_default_async_http_client(self.http_settings)
        self._sleep = sleep

    async def _probe(self, url: str, elapsed: float) -> HttpResponse:
        try:
            return await self.http_client.request(self._build_request(url, elapsed))
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            return HttpResponse.from_exception(exc, url=url)

    async def _pause(self, delay: float, cancel_event: asyncio.Event | None) -> bool:
        if self._sleep is None and cancel_event is not None:
            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                return False
            return True
        await (self._sleep(delay) if self._sleep is not None else asyncio.sleep(delay))
        return cancel_event is not None and cancel_event.is_set()

    async def wait(
        self,
        url: str,
        *,
        cancel_event: asyncio.Event | None = None,
        on_probe: ProbeCallback | None = None,
    ) -> PollResult:
        session = self._start(url)
        started = self._now()
        while True:
            if cancel_event is not None and cancel_event.is_set():
                return self._cancel(session, started)
            result, delay = self._record(session, await self._probe(session.url, self._now() - started), started, on_probe)
            if result is not None:
                return result
            if await self._pause(delay, cancel_event):
                return self._cancel(session, started)

    async def aclose(self) -> None:
        await self.http_client.aclose()


async def wait_until_ready_async(
    url: str,
    ready_status: int = 200,
    interval: float = 60.0,
    max_wait: float | None = 3600.0,
    max_attempts: int | None = None,
    *,
    http_client: AsyncHttpClient | None = None,
    http_settings: HttpSettings | None = None,
    cancel_event: asyncio.Event | None = None,
    on_probe: ProbeCallback | None = None,
    clock: Clock | None = None,
    sleep: AsyncSleep | None = None,
) -> PollResult:
    """Async variant of wait_until_ready."""
    policy = PollPolicy(interval=interval, max_wait=max_wait, max_attempts=max_attempts, ready_status=ready_status)
    validate_target_url(url)
    owns_client = http_client is None
    poller = AsyncReadinessPoller(http_client, policy, http_settings=http_settings, clock=clock, sleep=sleep)
    try:
        return await poller.wait(url, cancel_event=cancel_event, on_probe=on_probe)
    finally:
        if owns_client:
            await poller.aclose()


__all__ = ["AsyncReadinessPoller", "wait_until_ready_async"]
