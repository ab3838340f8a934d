# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for DeployReady."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .poll import PollResult, PollSession, PollStatus, ProbeResult

__all__ = [
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "PollResult",
    "PollSession",
    "PollStatus",
    "ProbeResult",
]
