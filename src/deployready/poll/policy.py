# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Polling policy: fixed interval plus an explicit time and/or attempt bound."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import PollSettings, load_poll_settings


@dataclass(frozen=True)
class PollPolicy:
    """
    Fixed-interval readiness policy.

    At least one of ``max_wait`` (seconds) or ``max_attempts`` must be set; an
    unbounded wait is rejected. A zero ``interval`` is only accepted together
    with ``max_attempts``, so a deadline alone never drives a tight loop. There
    is no backoff or jitter.
    """

    interval: float = 60.0
    max_wait: float | None = 3600.0
    max_attempts: int | None = None
    ready_status: int = 200

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError("interval must be >= 0")
        if self.max_wait is not None and self.max_wait <= 0:
            raise ValueError("max_wait must be > 0")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.max_wait is None and self.max_attempts is None:
            raise ValueError("a poll policy needs max_wait or max_attempts")
        if self.interval == 0 and self.max_attempts is None:
            raise ValueError("interval must be > 0 unless max_attempts is set")
        if not 100 <= self.ready_status <= 599:
            raise ValueError(f"ready_status {self.ready_status} is not an HTTP status code")

    @classmethod
    def from_settings(cls, settings: PollSettings) -> PollPolicy:
        """Build a policy from the shared PollSettings."""
        return cls(
            interval=settings.interval,
            max_wait=settings.max_wait,
            max_attempts=settings.max_attempts,
            ready_status=settings.ready_status,
        )

    def next_delay(self, attempts: int, elapsed: float) -> float | None:
        """
        Return how long to wait before the next probe, or None once a bound is exhausted.

        The delay is clipped to the remaining time so the total wait never passes
        ``max_wait``.
        """
        if self.max_attempts is not None and attempts >= self.max_attempts:
            return None
        if self.max_wait is None:
            return self.interval
        remaining = self.max_wait - elapsed
        if remaining <= 0:
            return None
        return min(self.interval, remaining)

    def probe_timeout(self, elapsed: float, timeout: float) -> float:
        """Cap a probe timeout so the wait cannot run past ``max_wait`` by more than one interval."""
        if self.max_wait is None:
            return timeout
        budget = max(self.max_wait - elapsed, 0.0) + self.interval
        return min(timeout, budget) if budget > 0 else timeout

    def describe(self) -> str:
        bounds = []
        if self.max_wait is not None:
            bounds.append(f"max {self.max_wait:g}s")
        if self.max_attempts is not None:
            bounds.append(f"max {self.max_attempts} attempt(s)")
        return f"every {self.interval:g}s, {', '.join(bounds)}"


def build_default_poll_policy() -> PollPolicy:
    """Create a PollPolicy from environment-backed PollSettings."""
    return PollPolicy.from_settings(load_poll_settings())


__all__ = ["PollPolicy", "build_default_poll_policy"]
