# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Prerequisite checks: required tools on PATH and working AWS credentials."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from typing import Protocol

from ..commands import CommandRunner, SubprocessRunner
from ..config import DeploySettings, load_deploy_settings
from .models import EnvironmentReport

logger = logging.getLogger(__name__)

AWS_IDENTITY_CHECK = "aws:credentials"
_IDENTITY_TIMEOUT = 30.0


class EnvironmentChecker(Protocol):
    """Anything that can tell whether the local environment is ready to provision."""

    def check(self) -> EnvironmentReport: ...


class CliEnvironmentChecker(EnvironmentChecker):
    """
    Check the environment by inspecting PATH and calling the AWS CLI.

    Every required command is checked and reported. The credential check runs
    only when all commands were found.
    """

    def __init__(
        self,
        settings: DeploySettings | None = None,
        runner: CommandRunner | None = None,
        which: Callable[[str], str | None] | None = None,
    ):
        self.settings = settings or load_deploy_settings()
        self.runner = runner or SubprocessRunner()
        self._which = which or shutil.which

    def check(self) -> EnvironmentReport:
        report = EnvironmentReport()
        logger.info("Validating that required commands are found in PATH...")
        for command in self.settings.required_commands:
            location = self._which(command)
            if location:
                logger.info("%s is found in the current PATH.", command)
                report.add(f"command:{command}", True, location)
            else:
                logger.error("%s is not found in the current PATH.", command)
                report.add(f"command:{command}", False, "not found in PATH")

        if report.failures:
            logger.error("One or more required commands are missing.")
            return report

        logger.info("Checking AWS CLI connection...")
        result = self.runner.run(
            [self.settings.aws_bin, "sts", "get-caller-identity", "--query", "Account", "--output", "text"],
            env={"AWS_DEFAULT_REGION": self.settings.region},
            timeout=_IDENTITY_TIMEOUT,
        )
        account_id = result.stdout.strip()
        if result.ok and account_id:
            report.account_id = account_id
            report.add(AWS_IDENTITY_CHECK, True, f"account {account_id}")
            logger.info("Successfully authenticated with AWS.")
        else:
            detail = result.stderr.strip() or "aws sts get-caller-identity failed"
            report.add(AWS_IDENTITY_CHECK, False, detail)
            logger.error("Failed to connect to AWS. Please check your credentials and environment.")
        return report


class StubEnvironmentChecker(EnvironmentChecker):
    """Returns a fixed report; counts invocations."""

    def __init__(self, report: EnvironmentReport | None = None, ok: bool = True):
        if report is None:
            report = EnvironmentReport()
            report.add("stub", ok, "" if ok else "stubbed failure")
        self.report = report
        self.calls = 0

    def check(self) -> EnvironmentReport:
        self.calls += 1
        return self.report
