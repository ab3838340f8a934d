# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Readiness polling exports."""

from .async_engine import AsyncReadinessPoller, wait_until_ready_async
from .engine import ReadinessPoller, wait_until_ready
from .policy import PollPolicy, build_default_poll_policy

__all__ = [
    "AsyncReadinessPoller",
    "PollPolicy",
    "ReadinessPoller",
    "build_default_poll_policy",
    "wait_until_ready",
    "wait_until_ready_async",
]
