# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Environment check results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import EnvironmentCheckError


@dataclass(frozen=True)
class CheckResult:
    name: str
    ok: bool
    detail: str = ""


@dataclass
class EnvironmentReport:
    """Outcome of every prerequisite check, in the order they ran."""

    checks: list[CheckResult] = field(default_factory=list)
    account_id: str | None = None

    @property
    def ok(self) -> bool:
        return bool(self.checks) and all(check.ok for check in self.checks)

    @property
    def failures(self) -> list[CheckResult]:
        return [check for check in self.checks if not check.ok]

    def add(self, name: str, ok: bool, detail: str = "") -> CheckResult:
        result = CheckResult(name=name, ok=ok, detail=detail)
        self.checks.append(result)
        return result

    def raise_for_status(self) -> EnvironmentReport:
        if not self.ok:
            raise EnvironmentCheckError(self)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "account_id": self.account_id,
            "checks": [{"name": c.name, "ok": c.ok, "detail": c.detail} for c in self.checks],
        }
