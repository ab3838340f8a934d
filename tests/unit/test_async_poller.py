# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio

import httpx
import pytest

from deployready.config import HttpSettings
from deployready.errors import ErrorCategory, InvalidTargetError
from deployready.http.adapters import AsyncStubHttpClient
from deployready.models.poll import PollStatus
from deployready.poll.async_engine import AsyncReadinessPoller, wait_until_ready_async
from deployready.poll.policy import PollPolicy

TARGET = "https://www.example.com"


class FakeAsyncClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


def test_async_ready_after_retries():
    clock = FakeAsyncClock()
    client = AsyncStubHttpClient([503, 503, 503, 200])
    poller = AsyncReadinessPoller(client, PollPolicy(interval=60, max_wait=300), clock=clock, sleep=clock.sleep)

    result = asyncio.run(poller.wait(TARGET))

    assert result.status is PollStatus.READY
    assert result.attempts == 4
    assert clock.sleeps == [60, 60, 60]
    assert result.elapsed == pytest.approx(180)


def test_async_timeout_under_connection_errors():
    clock = FakeAsyncClock()
    client = AsyncStubHttpClient([httpx.ConnectError("Connection refused")])
    poller = AsyncReadinessPoller(client, PollPolicy(interval=60, max_wait=120), clock=clock, sleep=clock.sleep)

    result = asyncio.run(poller.wait(TARGET))

    assert result.status is PollStatus.TIMED_OUT
    assert client.calls == 3
    assert result.elapsed <= 120 + 60
    assert result.last_probe.error_category is ErrorCategory.CONNECTION_ERROR


def test_async_invalid_url_rejected_before_request():
    client = AsyncStubHttpClient([200])
    poller = AsyncReadinessPoller(client, PollPolicy(interval=1, max_wait=10))

    with pytest.raises(InvalidTargetError):
        asyncio.run(poller.wait("missing-scheme.example.com"))
    assert client.calls == 0


def test_async_cancel_event_ends_wait():
    client = AsyncStubHttpClient([503])

    async def scenario():
        event = asyncio.Event()
        poller = AsyncReadinessPoller(client, PollPolicy(interval=3600, max_wait=7200))
        return await poller.wait(TARGET, cancel_event=event, on_probe=lambda probe: event.set())

    result = asyncio.run(scenario())

    assert result.status is PollStatus.CANCELLED
    assert client.calls == 1


def test_async_task_cancellation_propagates():
    client = AsyncStubHttpClient([503])

    async def scenario():
        poller = AsyncReadinessPoller(client, PollPolicy(interval=3600, max_wait=7200))
        task = asyncio.create_task(poller.wait(TARGET))
        for _ in range(5):
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert client.calls == 1


def test_wait_until_ready_async_closes_owned_client(monkeypatch):
    stub = AsyncStubHttpClient([200])
    monkeypatch.setattr("deployready.poll.async_engine.create_default_async_http_client", lambda settings=None: stub)

    result = asyncio.run(wait_until_ready_async(TARGET, interval=1, max_wait=10))

    assert result.ready
    assert stub.closed is True


def test_async_slow_probes_are_capped_by_remaining_time():
    clock = FakeAsyncClock()
    timeouts: list[float] = []

    class HangingAsyncClient(AsyncStubHttpClient):
        async def request(self, request):
            timeouts.append(request.timeout)
            clock.now += request.timeout
            return await super().request(request)

    client = HangingAsyncClient([httpx.ReadTimeout("timed out")])
    poller = AsyncReadinessPoller(
        client,
        PollPolicy(interval=5, max_wait=30),
        http_settings=HttpSettings(timeout=10),
        clock=clock,
        sleep=clock.sleep,
    )

    result = asyncio.run(poller.wait(TARGET))

    assert result.status is PollStatus.TIMED_OUT
    assert result.elapsed <= 30 + 5
    assert timeouts == [10, 10, 5]
