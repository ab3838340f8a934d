# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import threading

import httpx
import pytest

from deployready.config import HttpSettings
from deployready.errors import ErrorCategory, InvalidTargetError, ReadinessTimeoutError
from deployready.http.adapters import StubHttpClient
from deployready.http.models import HttpRequest, HttpResponse
from deployready.models.poll import PollSession, PollStatus, ProbeResult
from deployready.poll.engine import ReadinessPoller, wait_until_ready
from deployready.poll.policy import PollPolicy

TARGET = "https://www.example.com"


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


def make_poller(responses, clock, **policy_kwargs):
    client = StubHttpClient(responses)
    policy = PollPolicy(**policy_kwargs)
    poller = ReadinessPoller(client, policy, http_settings=HttpSettings(), clock=clock, sleep=clock.sleep)
    return poller, client


def test_immediate_ready_probes_once():
    clock = FakeClock()
    poller, client = make_poller([200], clock, interval=60, max_wait=300)

    result = poller.wait(TARGET)

    assert result.status is PollStatus.READY
    assert result.ready is True
    assert result.attempts == 1
    assert client.calls == 1
    assert clock.sleeps == []


def test_ready_after_retries_matches_example_scenario():
    clock = FakeClock()
    poller, client = make_poller([503, 503, 503, 200], clock, interval=60, max_wait=300)

    result = poller.wait(TARGET)

    assert result.status is PollStatus.READY
    assert result.attempts == 4
    assert client.calls == 4
    assert clock.sleeps == [60, 60, 60]
    assert result.elapsed == pytest.approx(180)


def test_never_ready_times_out_within_one_interval_of_bound():
    clock = FakeClock()
    poller, client = make_poller([503], clock, interval=60, max_wait=300)

    result = poller.wait(TARGET)

    assert result.status is PollStatus.TIMED_OUT
    assert result.elapsed >= 300
    assert result.elapsed <= 300 + 60
    assert client.calls == 6
    assert result.last_probe.status_code == 503
    assert "503" in result.reason


def test_last_sleep_is_clipped_to_remaining_time():
    clock = FakeClock()
    poller, client = make_poller([503], clock, interval=70, max_wait=100)

    result = poller.wait(TARGET)

    assert result.status is PollStatus.TIMED_OUT
    assert clock.sleeps == [70, 30]
    assert client.calls == 3
    assert result.elapsed == pytest.approx(100)


class HangingClient:
    """Every request runs until its timeout, advancing the fake clock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.timeouts: list[float] = []

    def request(self, request: HttpRequest) -> HttpResponse:
        self.timeouts.append(request.timeout)
        self.clock.now += request.timeout
        return HttpResponse.from_exception(httpx.ConnectTimeout("timed out"), url=request.url)

    def close(self) -> None:
        pass


def test_slow_probes_stay_within_one_interval_of_bound():
    clock = FakeClock()
    client = HangingClient(clock)
    poller = ReadinessPoller(
        client,
        PollPolicy(interval=5, max_wait=30),
        http_settings=HttpSettings(timeout=10),
        clock=clock,
        sleep=clock.sleep,
    )

    result = poller.wait(TARGET)

    assert result.status is PollStatus.TIMED_OUT
    assert result.elapsed <= 30 + 5
    assert client.timeouts == [10, 10, 5]
    assert result.last_probe.error_category is ErrorCategory.TIMEOUT


def test_max_attempts_bound():
    clock = FakeClock()
    poller, client = make_poller([500], clock, interval=5, max_wait=None, max_attempts=3)

    result = poller.wait(TARGET)

    assert result.status is PollStatus.TIMED_OUT
    assert client.calls == 3
    assert clock.sleeps == [5, 5]


def test_connection_refused_is_never_raised():
    clock = FakeClock()
    refused = httpx.ConnectError("[Errno 111] Connection refused")
    poller, client = make_poller([refused], clock, interval=10, max_wait=None, max_attempts=4)

    result = poller.wait(TARGET)

    assert result.status is PollStatus.TIMED_OUT
    assert client.calls == 4
    assert result.last_probe.status_code is None
    assert result.last_probe.error_category is ErrorCategory.CONNECTION_ERROR
    assert result.last_status_label == "CONNECTION_ERROR"


def test_client_exceptions_are_treated_as_not_ready():
    class ExplodingThenReady:
        def __init__(self):
            self.calls = 0

        def request(self, request: HttpRequest) -> HttpResponse:  # noqa: ARG002
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("boom")
            return HttpResponse(ok=True, status_code=200)

        def close(self) -> None:
            return None

    clock = FakeClock()
    client = ExplodingThenReady()
    poller = ReadinessPoller(client, PollPolicy(interval=1, max_wait=10), clock=clock, sleep=clock.sleep)

    result = poller.wait(TARGET)

    assert result.status is PollStatus.READY
    assert client.calls == 2


def test_redirects_and_client_errors_are_not_ready():
    clock = FakeClock()
    poller, client = make_poller([301, 404, 200], clock, interval=1, max_wait=100)

    result = poller.wait(TARGET)

    assert result.ready
    assert client.calls == 3


def test_custom_ready_status():
    clock = FakeClock()
    poller, _ = make_poller([200, 204], clock, interval=1, max_wait=100, ready_status=204)

    result = poller.wait(TARGET)

    assert result.ready
    assert result.attempts == 2


@pytest.mark.parametrize("url", ["", "   ", "example.com", "www.example.com/path", "ftp://example.com", "https://", None])
def test_malformed_url_rejected_before_any_request(url):
    clock = FakeClock()
    poller, client = make_poller([200], clock, interval=1, max_wait=10)

    with pytest.raises(InvalidTargetError) as excinfo:
        poller.wait(url)

    assert not isinstance(excinfo.value, ReadinessTimeoutError)
    assert client.calls == 0


def test_wait_until_ready_rejects_invalid_url_without_creating_client(monkeypatch):
    created = []
    monkeypatch.setattr(
        "deployready.poll.engine.create_default_http_client",
        lambda settings=None: created.append(settings),
    )

    with pytest.raises(InvalidTargetError):
        wait_until_ready("not-a-url", interval=1, max_wait=5)
    assert created == []


def test_wait_until_ready_closes_owned_client(monkeypatch):
    stub = StubHttpClient([503, 200])
    monkeypatch.setattr("deployready.poll.engine.create_default_http_client", lambda settings=None: stub)
    clock = FakeClock()

    result = wait_until_ready(TARGET, interval=60, max_wait=300, clock=clock, sleep=clock.sleep)

    assert result.ready
    assert stub.closed is True
    assert clock.sleeps == [60]


def test_wait_until_ready_leaves_injected_client_open():
    stub = StubHttpClient([200])
    result = wait_until_ready(TARGET, http_client=stub, interval=0, max_attempts=1, max_wait=None)
    assert result.ready
    assert stub.closed is False


def test_probe_uses_configured_method_and_timeout():
    clock = FakeClock()
    client = StubHttpClient([200])
    settings = HttpSettings(timeout=3.5, probe_method="GET")
    poller = ReadinessPoller(client, PollPolicy(interval=1, max_wait=10), http_settings=settings, clock=clock, sleep=clock.sleep)

    poller.wait(TARGET)

    request = client.requests[0]
    assert request.method == "GET"
    assert request.timeout == 3.5
    assert request.url == TARGET


def test_cancel_event_set_before_start():
    clock = FakeClock()
    poller, client = make_poller([503], clock, interval=1, max_wait=10)
    event = threading.Event()
    event.set()

    result = poller.wait(TARGET, cancel_event=event)

    assert result.status is PollStatus.CANCELLED
    assert client.calls == 0


def test_cancel_event_interrupts_wait_between_probes():
    clock = FakeClock()
    client = StubHttpClient([503])
    event = threading.Event()
    poller = ReadinessPoller(client, PollPolicy(interval=3600, max_wait=7200), clock=clock)

    result = poller.wait(TARGET, cancel_event=event, on_probe=lambda probe: event.set())

    assert result.status is PollStatus.CANCELLED
    assert client.calls == 1
    assert result.raise_for_status() is result


def test_on_probe_reports_every_attempt():
    clock = FakeClock()
    poller, _ = make_poller([503, 502, 200], clock, interval=10, max_wait=100)
    seen: list[ProbeResult] = []

    poller.wait(TARGET, on_probe=seen.append)

    assert [p.attempt for p in seen] == [1, 2, 3]
    assert [p.status_code for p in seen] == [503, 502, 200]
    assert [p.elapsed for p in seen] == [0, 10, 20]
    assert [p.ready for p in seen] == [False, False, True]


def test_progress_logged_as_warning(caplog):
    caplog.set_level(logging.INFO, logger="deployready.poll.engine")
    clock = FakeClock()
    poller, _ = make_poller([503, 200], clock, interval=60, max_wait=300)

    poller.wait(TARGET)

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Still waiting" in warnings[0].getMessage()
    assert "503" in warnings[0].getMessage()
    assert any("URL is reachable" in r.getMessage() for r in caplog.records)


def test_timeout_result_raises_on_demand():
    clock = FakeClock()
    poller, _ = make_poller([503], clock, interval=1, max_wait=None, max_attempts=2)

    result = poller.wait(TARGET)

    with pytest.raises(ReadinessTimeoutError) as excinfo:
        result.raise_for_status()
    assert excinfo.value.result is result
    assert "503" in str(excinfo.value)
    assert result.to_dict()["status"] == "TIMED_OUT"


def test_session_refuses_second_terminal_transition():
    session = PollSession(url=TARGET)
    session.record(ProbeResult(attempt=1, elapsed=0.0, ready=True, status_code=200))
    session.finish(PollStatus.READY, 0.0)

    with pytest.raises(RuntimeError):
        session.finish(PollStatus.TIMED_OUT, 1.0)
    with pytest.raises(RuntimeError):
        session.record(ProbeResult(attempt=2, elapsed=1.0, ready=False, status_code=503))


def test_session_finish_requires_terminal_status():
    with pytest.raises(ValueError):
        PollSession(url=TARGET).finish(PollStatus.RUNNING, 0.0)
