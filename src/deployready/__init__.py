# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
DeployReady package entrypoint.

This package wraps the provisioning of a Terraform-managed static website
(environment checks, apply, destroy) and provides a deployment readiness
poller that waits for the site to answer with HTTP 200. HTTP behavior is
abstracted behind an injectable client interface, and external CLIs behind
injectable checker/runner interfaces.
"""

from .commands import CommandResult, CommandRunner, SubprocessRunner
from .config import DeploySettings, HttpSettings, PollSettings, load_deploy_settings, load_http_settings, load_poll_settings
from .environment import CliEnvironmentChecker, EnvironmentChecker, EnvironmentReport
from .errors import (
    CommandError,
    DeployReadyError,
    EnvironmentCheckError,
    InvalidTargetError,
    ReadinessTimeoutError,
    TargetResolutionError,
)
from .http import (
    AsyncHttpxClient,
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    create_default_http_client,
)
from .log import setup_logging
from .models import PollResult, PollStatus, ProbeResult
from .poll import (
    AsyncReadinessPoller,
    PollPolicy,
    ReadinessPoller,
    wait_until_ready,
    wait_until_ready_async,
)
from .runtime import DeployReady
from .terraform import TerraformRunner
from .version import __version__

__all__ = [
    "AsyncHttpxClient",
    "AsyncReadinessPoller",
    "CliEnvironmentChecker",
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "DeployReady",
    "DeployReadyError",
    "DeploySettings",
    "EnvironmentCheckError",
    "EnvironmentChecker",
    "EnvironmentReport",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "InvalidTargetError",
    "PollPolicy",
    "PollResult",
    "PollSettings",
    "PollStatus",
    "ProbeResult",
    "ReadinessPoller",
    "ReadinessTimeoutError",
    "SubprocessRunner",
    "TargetResolutionError",
    "TerraformRunner",
    "create_default_http_client",
    "load_deploy_settings",
    "load_http_settings",
    "load_poll_settings",
    "setup_logging",
    "wait_until_ready",
    "wait_until_ready_async",
    "__version__",
]
