# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Thin Terraform wrapper for the website stack.

Terraform itself (planning, state, dependency ordering) is an external tool;
this module only invokes it in the configured working directory with the AWS
region passed explicitly to each child process.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from ..commands import CommandResult, CommandRunner, SubprocessRunner
from ..config import DeploySettings, load_deploy_settings
from ..errors import TargetResolutionError

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")
_UNKNOWN_MARKERS = ("(known after apply)", "(sensitive value)", "null")


def parse_console_string(output: str) -> str:
    """
    Turn ``terraform console`` output for a string expression into a Python str.

    Recent Terraform versions print strings quoted (``"example.com"``); older
    ones print them bare.
    """
    lines = [line.strip() for line in str(output or "").splitlines() if line.strip()]
    if not lines:
        raise TargetResolutionError("terraform console returned no output")
    value = lines[-1]
    if value in _UNKNOWN_MARKERS:
        raise TargetResolutionError(f"terraform console returned {value}")
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        try:
            decoded = json.loads(value)
        except ValueError:
            decoded = value[1:-1]
        value = str(decoded)
    if not value:
        raise TargetResolutionError("terraform console returned an empty string")
    return value


class TerraformRunner:
    """Run ``terraform`` subcommands against the configured working directory."""

    def __init__(
        self,
        settings: DeploySettings | None = None,
        runner: CommandRunner | None = None,
        *,
        stream_output: bool = True,
    ):
        self.settings = settings or load_deploy_settings()
        self.runner = runner or SubprocessRunner()
        self.stream_output = stream_output

    @property
    def working_dir(self) -> str:
        return str(Path(self.settings.working_dir))

    def _env(self) -> dict[str, str]:
        return {"AWS_DEFAULT_REGION": self.settings.region}

    def _run(self, *args: str, input_text: str | None = None, capture: bool | None = None) -> CommandResult:
        capture = (not self.stream_output) if capture is None else capture
        argv = [self.settings.terraform_bin, *args]
        logger.info("Running %s in %s (region %s)", " ".join(argv), self.working_dir, self.settings.region)
        result = self.runner.run(
            argv,
            cwd=self.working_dir,
            env=self._env(),
            input_text=input_text,
            timeout=self.settings.command_timeout,
            capture=capture,
        )
        return result.check()

    def init(self) -> CommandResult:
        return self._run("init", "-input=false")

    def apply(self) -> CommandResult:
        """Initialize and apply the stack without an approval prompt."""
        self.init()
        result = self._run("apply", "-auto-approve", "-input=false")
        logger.info("Website provisioning complete.")
        return result

    def destroy(self) -> CommandResult:
        """Initialize and destroy every resource in the stack without an approval prompt."""
        logger.info("Starting destruction of website infrastructure...")
        self.init()
        result = self._run("destroy", "-auto-approve", "-input=false")
        logger.info("Website infrastructure destruction complete.")
        return result

    def console(self, expression: str) -> str:
        """Evaluate ``expression`` with ``terraform console`` and return raw stdout."""
        result = self._run("console", input_text=f"{expression}\n", capture=True)
        return result.stdout

    def read_variable(self, name: str) -> str:
        """Return the string value of ``var.<name>``."""
        if not _IDENTIFIER_RE.match(name or ""):
            raise TargetResolutionError(f"invalid Terraform variable name {name!r}")
        return parse_console_string(self.console(f"var.{name}"))


__all__ = ["TerraformRunner", "parse_console_string"]
