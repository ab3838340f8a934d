# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Deployment readiness poller.

Probes a URL at a fixed interval until it answers with the ready status code.
Every other outcome (any other status, DNS/connection/TLS failures, timeouts)
counts as "not ready yet" and is logged, never raised. The wait ends when the
target is ready, the policy bound is exhausted, or the caller cancels.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from ..config import HttpSettings, load_http_settings
from ..http.client import HttpClient, create_default_http_client
from ..http.models import HttpRequest, HttpResponse
from ..http.url import validate_target_url
from ..models.poll import PollResult, PollSession, PollStatus, ProbeResult
from .policy import PollPolicy, build_default_poll_policy

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
ProbeCallback = Callable[[ProbeResult], None]


class _PollerBase:
    """Loop bookkeeping shared by the sync and async pollers."""

    def __init__(
        self,
        policy: PollPolicy | None = None,
        http_settings: HttpSettings | None = None,
        clock: Clock | None = None,
    ):
        self.policy = policy or build_default_poll_policy()
        self.http_settings = http_settings or load_http_settings()
        self._clock = clock

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.monotonic()

    def _start(self, url: object) -> PollSession:
        target = validate_target_url(url)
        logger.info("Waiting for %s to return HTTP %s (%s)", target, self.policy.ready_status, self.policy.describe())
        return PollSession(url=target)

    def _build_request(self, url: str, elapsed: float) -> HttpRequest:
        return HttpRequest(
            url=url,
            method=self.http_settings.probe_method,
            timeout=self.policy.probe_timeout(elapsed, self.http_settings.timeout),
            allow_redirects=self.http_settings.allow_redirects,
        )

    def _record(
        self,
        session: PollSession,
        response: HttpResponse,
        started: float,
        on_probe: ProbeCallback | None,
    ) -> tuple[PollResult | None, float]:
        """Record one probe; return a terminal result or the delay before the next probe."""
        elapsed = self._now() - started
        probe = ProbeResult.from_response(session.attempts + 1, elapsed, response, self.policy.ready_status)
        session.record(probe)
        if on_probe is not None:
            on_probe(probe)

        if probe.ready:
            logger.info("URL is reachable: %s (attempt %d, %.1fs)", session.url, probe.attempt, elapsed)
            return session.finish(PollStatus.READY, elapsed), 0.0

        if probe.status_code is None:
            logger.warning(
                "Still waiting... (attempt %d, %.1fs elapsed, status: %s: %s)",
                probe.attempt,
                elapsed,
                probe.status_label,
                probe.error_message or "no response",
            )
        else:
            logger.warning("Still waiting... (attempt %d, %.1fs elapsed, status: %s)", probe.attempt, elapsed, probe.status_label)

        delay = self.policy.next_delay(probe.attempt, elapsed)
        if delay is None:
            reason = f"not ready after {probe.attempt} attempt(s) in {elapsed:.1f}s (last status: {probe.status_label})"
            logger.error("Giving up on %s: %s", session.url, reason)
            return session.finish(PollStatus.TIMED_OUT, elapsed, reason), 0.0
        return None, delay

    def _cancel(self, session: PollSession, started: float) -> PollResult:
        elapsed = self._now() - started
        logger.warning("Readiness wait for %s cancelled after %d attempt(s)", session.url, session.attempts)
        return session.finish(PollStatus.CANCELLED, elapsed, "cancelled")


class ReadinessPoller(_PollerBase):
    """
    Synchronous readiness poller.

    The HTTP client, clock and sleep function are injectable so callers and tests
    can substitute fakes. When a ``cancel_event`` is passed to ``wait`` and no
    sleep function was injected, waits block on the event so cancellation is
    observed immediately.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        policy: PollPolicy | None = None,
        *,
        http_settings: HttpSettings | None = None,
        clock: Clock | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        super().__init__(policy, http_settings, clock)
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self._sleep = sleep

    def _probe(self, url: str, elapsed: float) -> HttpResponse:
        try:
            return self.http_client.request(self._build_request(url, elapsed))
        except Exception as exc:  # noqa: BLE001
            return HttpResponse.from_exception(exc, url=url)

    def _pause(self, delay: float, cancel_event: threading.Event | None) -> bool:
        """Wait for ``delay`` seconds; return True when cancellation was requested."""
        if self._sleep is None and cancel_event is not None:
            return cancel_event.wait(delay)
        if self._sleep is not None:
            self._sleep(delay)
        else:
            time.sleep(delay)
        return cancel_event is not None and cancel_event.is_set()

    def wait(
        self,
        url: str,
        *,
        cancel_event: threading.Event | None = None,
        on_probe: ProbeCallback | None = None,
    ) -> PollResult:
        """Block until ``url`` is ready, the policy bound is exhausted, or ``cancel_event`` is set."""
        session = self._start(url)
        started = self._now()
        while True:
            if cancel_event is not None and cancel_event.is_set():
                return self._cancel(session, started)
            result, delay = self._record(session, self._probe(session.url, self._now() - started), started, on_probe)
            if result is not None:
                return result
            if self._pause(delay, cancel_event):
                return self._cancel(session, started)

    def close(self) -> None:
        self.http_client.close()


def wait_until_ready(
    url: str,
    ready_status: int = 200,
    interval: float = 60.0,
    max_wait: float | None = 3600.0,
    max_attempts: int | None = None,
    *,
    http_client: HttpClient | None = None,
    http_settings: HttpSettings | None = None,
    cancel_event: threading.Event | None = None,
    on_probe: ProbeCallback | None = None,
    clock: Clock | None = None,
    sleep: Callable[[float], None] | None = None,
) -> PollResult:
    """
    Wait until ``url`` answers with ``ready_status``.

    Raises InvalidTargetError for a malformed URL before any request is made.
    Returns a PollResult whose status is READY, TIMED_OUT or CANCELLED; call
    ``raise_for_status()`` on it to turn a timeout into an exception.
    """
    policy = PollPolicy(interval=interval, max_wait=max_wait, max_attempts=max_attempts, ready_status=ready_status)
    validate_target_url(url)
    owns_client = http_client is None
    poller = ReadinessPoller(http_client, policy, http_settings=http_settings, clock=clock, sleep=sleep)
    try:
        return poller.wait(url, cancel_event=cancel_event, on_probe=on_probe)
    finally:
        if owns_client:
            poller.close()


__all__ = ["ReadinessPoller", "wait_until_ready"]
