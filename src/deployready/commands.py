# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""External command execution behind an injectable runner interface."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from .errors import CommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    args: list[str]
    returncode: int | None
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> CommandResult:
        """Raise CommandError unless the command exited with status 0."""
        if not self.ok:
            raise CommandError(self.args, self.returncode, self.stderr)
        return self


class CommandRunner(Protocol):
    """Minimal protocol for running an external command to completion."""

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        input_text: str | None = None,
        timeout: float | None = None,
        capture: bool = True,
    ) -> CommandResult: ...


class SubprocessRunner(CommandRunner):
    """
    Run commands with ``subprocess.run`` (argument lists, never a shell).

    ``env`` entries are layered over the current process environment for the
    child only. A missing executable is reported as exit code 127 and a timeout
    as ``returncode=None`` rather than raised.
    """

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        input_text: str | None = None,
        timeout: float | None = None,
        capture: bool = True,
    ) -> CommandResult:
        argv = [str(arg) for arg in args]
        child_env = {**os.environ, **env} if env else None
        logger.debug("Running %s (cwd=%s)", " ".join(argv), cwd or ".")
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                env=child_env,
                input=input_text,
                capture_output=capture,
                text=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            return CommandResult(argv, 127, "", str(exc))
        except subprocess.TimeoutExpired as exc:
            stdout = exc.stdout.decode() if isinstance(exc.stdout, bytes) else (exc.stdout or "")
            stderr = exc.stderr.decode() if isinstance(exc.stderr, bytes) else (exc.stderr or "")
            return CommandResult(argv, None, stdout, stderr or f"timed out after {timeout}s")
        return CommandResult(argv, completed.returncode, completed.stdout or "", completed.stderr or "")


@dataclass
class RecordedCall:
    args: list[str]
    cwd: str | None
    env: dict[str, str]
    input_text: str | None


@dataclass
class StubCommandRunner(CommandRunner):
    """Programmable runner for tests: maps a command prefix to a canned result."""

    results: dict[tuple[str, ...], CommandResult] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)

    def add(self, prefix: Sequence[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.results[tuple(prefix)] = CommandResult(list(prefix), returncode, stdout, stderr)

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        input_text: str | None = None,
        timeout: float | None = None,  # noqa: ARG002
        capture: bool = True,  # noqa: ARG002
    ) -> CommandResult:
        argv = [str(arg) for arg in args]
        self.calls.append(RecordedCall(argv, cwd, dict(env or {}), input_text))
        best: tuple[str, ...] | None = None
        for prefix in self.results:
            if tuple(argv[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return CommandResult(argv, 0)
        canned = self.results[best]
        return CommandResult(argv, canned.returncode, canned.stdout, canned.stderr)


__all__ = ["CommandResult", "CommandRunner", "RecordedCall", "StubCommandRunner", "SubprocessRunner"]
