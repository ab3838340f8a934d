# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Environment prerequisite checks."""

from .checker import CliEnvironmentChecker, EnvironmentChecker, StubEnvironmentChecker
from .models import CheckResult, EnvironmentReport

__all__ = [
    "CheckResult",
    "CliEnvironmentChecker",
    "EnvironmentChecker",
    "EnvironmentReport",
    "StubEnvironmentChecker",
]
