# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from deployready.commands import StubCommandRunner
from deployready.config import DeploySettings
from deployready.environment.checker import AWS_IDENTITY_CHECK, CliEnvironmentChecker, StubEnvironmentChecker
from deployready.errors import EnvironmentCheckError

IDENTITY = ["aws", "sts", "get-caller-identity", "--query", "Account", "--output", "text"]


def fake_which(found):
    return lambda command: f"/usr/bin/{command}" if command in found else None


def test_all_prerequisites_present():
    runner = StubCommandRunner()
    runner.add(IDENTITY, stdout="123456789012\n")
    checker = CliEnvironmentChecker(DeploySettings(), runner, which=fake_which({"aws", "terraform", "jq"}))

    report = checker.check()

    assert report.ok is True
    assert report.account_id == "123456789012"
    assert [c.name for c in report.checks] == ["command:aws", "command:terraform", "command:jq", AWS_IDENTITY_CHECK]
    assert runner.calls[0].args == IDENTITY
    assert runner.calls[0].env == {"AWS_DEFAULT_REGION": "us-east-1"}
    assert report.raise_for_status() is report


def test_missing_command_skips_credential_check():
    runner = StubCommandRunner()
    checker = CliEnvironmentChecker(DeploySettings(), runner, which=fake_which({"aws", "terraform"}))

    report = checker.check()

    assert report.ok is False
    assert [c.name for c in report.failures] == ["command:jq"]
    assert len(report.checks) == 3
    assert runner.calls == []


def test_failed_credentials_reported():
    runner = StubCommandRunner()
    runner.add(IDENTITY, returncode=255, stderr="Unable to locate credentials\n")
    settings = DeploySettings(region="eu-central-1")
    checker = CliEnvironmentChecker(settings, runner, which=fake_which(set(settings.required_commands)))

    report = checker.check()

    assert report.ok is False
    assert report.account_id is None
    assert report.failures[0].name == AWS_IDENTITY_CHECK
    assert "Unable to locate credentials" in report.failures[0].detail
    assert runner.calls[0].env["AWS_DEFAULT_REGION"] == "eu-central-1"
    with pytest.raises(EnvironmentCheckError) as excinfo:
        report.raise_for_status()
    assert AWS_IDENTITY_CHECK in str(excinfo.value)


def test_custom_required_commands():
    runner = StubCommandRunner()
    runner.add(IDENTITY, stdout="1\n")
    settings = DeploySettings(required_commands=("aws", "az"))
    checker = CliEnvironmentChecker(settings, runner, which=fake_which({"aws", "az"}))

    report = checker.check()

    assert report.ok is True
    assert report.to_dict()["checks"][1] == {"name": "command:az", "ok": True, "detail": "/usr/bin/az"}


def test_stub_environment_checker():
    failing = StubEnvironmentChecker(ok=False)
    report = failing.check()
    assert report.ok is False
    assert failing.calls == 1
    assert StubEnvironmentChecker().check().ok is True
