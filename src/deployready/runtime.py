# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level DeployReady facade for provisioning and readiness workflows."""

from __future__ import annotations

import logging
import threading
from contextlib import suppress

from .commands import CommandRunner
from .config import DeploySettings, HttpSettings, load_deploy_settings, load_http_settings
from .environment.checker import CliEnvironmentChecker, EnvironmentChecker
from .environment.models import EnvironmentReport
from .errors import CommandError, TargetResolutionError
from .http.client import HttpClient, create_default_http_client
from .http.url import build_site_url, validate_target_url
from .models.poll import PollResult
from .poll.engine import ProbeCallback, ReadinessPoller
from .poll.policy import PollPolicy, build_default_poll_policy
from .terraform.runner import TerraformRunner

logger = logging.getLogger(__name__)


class DeployReady:
    """
    Convenience wrapper that wires the HTTP client, environment checker and
    Terraform runner around one set of settings.

    Every collaborator is injectable so tests and embedding tools can replace
    the CLI- and network-backed defaults.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        environment_checker: EnvironmentChecker | None = None,
        terraform: TerraformRunner | None = None,
        command_runner: CommandRunner | None = None,
        http_settings: HttpSettings | None = None,
        deploy_settings: DeploySettings | None = None,
        policy: PollPolicy | None = None,
    ):
        self.http_settings = http_settings or load_http_settings()
        self.deploy_settings = deploy_settings or load_deploy_settings()
        self.policy = policy or build_default_poll_policy()
        self._http_client = http_client
        self.environment_checker = environment_checker or CliEnvironmentChecker(self.deploy_settings, command_runner)
        self.terraform = terraform or TerraformRunner(self.deploy_settings, command_runner)

    @property
    def http_client(self) -> HttpClient:
        """Create the default client on first use; provisioning alone never probes."""
        if self._http_client is None:
            self._http_client = create_default_http_client(self.http_settings)
        return self._http_client

    def check_environment(self) -> EnvironmentReport:
        report = self.environment_checker.check()
        if report.ok:
            logger.info("Environment validation successful.")
        return report

    def resolve_target(self) -> str:
        """Derive the public site URL from the stack's domain variable."""
        try:
            domain = self.terraform.read_variable(self.deploy_settings.domain_variable)
        except CommandError as exc:
            raise TargetResolutionError(f"could not read var.{self.deploy_settings.domain_variable}: {exc}") from exc
        return build_site_url(domain, prefix=self.deploy_settings.host_prefix)

    def wait_until_ready(
        self,
        url: str | None = None,
        *,
        policy: PollPolicy | None = None,
        cancel_event: threading.Event | None = None,
        on_probe: ProbeCallback | None = None,
    ) -> PollResult:
        target = url if url is not None else self.resolve_target()
        poller = ReadinessPoller(self.http_client, policy or self.policy, http_settings=self.http_settings)
        return poller.wait(target, cancel_event=cancel_event, on_probe=on_probe)

    def provision(
        self,
        *,
        wait: bool = False,
        url: str | None = None,
        cancel_event: threading.Event | None = None,
        on_probe: ProbeCallback | None = None,
    ) -> PollResult | None:
        """
        Check the environment, apply the stack and optionally wait for the site.

        Raises EnvironmentCheckError before touching Terraform when a prerequisite
        is missing, and CommandError when a Terraform command fails. An explicit
        ``url`` is validated first, so invalid input never reaches Terraform.
        """
        if wait and url is not None:
            validate_target_url(url)
        logger.info("Running environment validation...")
        self.check_environment().raise_for_status()
        logger.info("AWS default region set to %s", self.deploy_settings.region)
        self.terraform.apply()
        if not wait:
            return None
        return self.wait_until_ready(url, cancel_event=cancel_event, on_probe=on_probe)

    def teardown(self) -> None:
        logger.info("AWS default region set to %s", self.deploy_settings.region)
        self.terraform.destroy()

    def close(self) -> None:
        if self._http_client is None:
            return
        with suppress(Exception):
            if hasattr(self._http_client, "close"):
                self._http_client.close()

    def __enter__(self) -> DeployReady:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
