# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Poll session domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import ErrorCategory, ReadinessTimeoutError, error_category_to_reason
from ..http.models import HttpResponse


class PollStatus(str, Enum):
    RUNNING = "RUNNING"
    READY = "READY"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"

    @property
    def terminal(self) -> bool:
        return self is not PollStatus.RUNNING


@dataclass(frozen=True)
class ProbeResult:
    """One readiness probe: either a status code or a transport failure."""

    attempt: int
    elapsed: float
    ready: bool
    status_code: int | None = None
    error_category: ErrorCategory = ErrorCategory.NONE
    error_message: str | None = None

    @property
    def status_label(self) -> str:
        if self.status_code is not None:
            return str(self.status_code)
        if self.error_category not in (ErrorCategory.NONE, ErrorCategory.UNKNOWN_ERROR):
            return self.error_category.value
        return "no response"

    @classmethod
    def from_response(cls, attempt: int, elapsed: float, response: HttpResponse, ready_status: int) -> ProbeResult:
        return cls(
            attempt=attempt,
            elapsed=elapsed,
            ready=response.status_code == ready_status,
            status_code=response.status_code,
            error_category=response.error_category,
            error_message=response.error_message,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempt": self.attempt,
            "elapsed": round(self.elapsed, 3),
            "ready": self.ready,
            "status_code": self.status_code,
            "error_category": self.error_category.value,
            "error_message": self.error_message,
        }


@dataclass
class PollSession:
    """
    Mutable state of one readiness wait.

    A session starts RUNNING and moves exactly once to READY, TIMED_OUT or
    CANCELLED. It is owned by the poller driving it and discarded once the
    PollResult has been produced.
    """

    url: str
    attempts: int = 0
    elapsed: float = 0.0
    status: PollStatus = PollStatus.RUNNING
    history: list[ProbeResult] = field(default_factory=list)

    @property
    def last_probe(self) -> ProbeResult | None:
        return self.history[-1] if self.history else None

    def record(self, probe: ProbeResult) -> None:
        if self.status.terminal:
            raise RuntimeError(f"Poll session for {self.url} already finished as {self.status.value}")
        self.attempts = probe.attempt
        self.elapsed = probe.elapsed
        self.history.append(probe)

    def finish(self, status: PollStatus, elapsed: float, reason: str = "") -> PollResult:
        if not status.terminal:
            raise ValueError("A poll session can only finish in a terminal state")
        if self.status.terminal:
            raise RuntimeError(f"Poll session for {self.url} already finished as {self.status.value}")
        self.status = status
        self.elapsed = elapsed
        return PollResult(
            status=status,
            url=self.url,
            attempts=self.attempts,
            elapsed=elapsed,
            last_probe=self.last_probe,
            reason=reason,
        )


@dataclass(frozen=True)
class PollResult:
    """Final outcome of a readiness wait."""

    status: PollStatus
    url: str
    attempts: int
    elapsed: float
    last_probe: ProbeResult | None = None
    reason: str = ""

    @property
    def ready(self) -> bool:
        return self.status is PollStatus.READY

    @property
    def last_status_label(self) -> str:
        return self.last_probe.status_label if self.last_probe else "none"

    @property
    def last_error_reason(self) -> str:
        if self.last_probe is None:
            return ""
        return error_category_to_reason(self.last_probe.error_category)

    def raise_for_status(self) -> PollResult:
        """Raise ReadinessTimeoutError unless the target became ready."""
        if self.status is PollStatus.TIMED_OUT:
            raise ReadinessTimeoutError(self)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "url": self.url,
            "attempts": self.attempts,
            "elapsed": round(self.elapsed, 3),
            "reason": self.reason,
            "last_probe": self.last_probe.to_dict() if self.last_probe else None,
        }
