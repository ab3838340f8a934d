# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for DeployReady."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"DeployReady/{__version__} (readiness probe)"
DEFAULT_REQUIRED_COMMANDS = ("aws", "terraform", "jq")


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_int_env(name: str, default: int | None) -> int | None:
    try:
        value = os.getenv(name)
        if value is None:
            return default
        parsed = int(value)
        return parsed if parsed > 0 else None
    except ValueError:
        return default


def _optional_float_env(name: str, default: float | None) -> float | None:
    try:
        value = os.getenv(name)
        if value is None:
            return default
        parsed = float(value)
        return parsed if parsed > 0 else None
    except ValueError:
        return default


def _list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


@dataclass
class HttpSettings:
    """HTTP client defaults for readiness probes."""

    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    # Certificates are usually still propagating while we wait.
    verify_ssl: bool = False
    probe_method: str = "HEAD"

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        method = os.getenv("DEPLOYREADY_PROBE_METHOD", cls.probe_method).strip().upper()
        if method not in {"HEAD", "GET"}:
            method = cls.probe_method
        return cls(
            timeout=_float_env("DEPLOYREADY_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("DEPLOYREADY_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("DEPLOYREADY_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("DEPLOYREADY_HTTP_VERIFY_SSL", cls.verify_ssl),
            probe_method=method,
        )


@dataclass
class PollSettings:
    """Readiness polling defaults."""

    interval: float = 60.0
    max_wait: float | None = 3600.0
    max_attempts: int | None = None
    ready_status: int = 200

    @classmethod
    def from_env(cls) -> "PollSettings":
        max_wait = _optional_float_env("DEPLOYREADY_POLL_MAX_WAIT", cls.max_wait)
        max_attempts = _optional_int_env("DEPLOYREADY_POLL_MAX_ATTEMPTS", cls.max_attempts)
        interval = _float_env("DEPLOYREADY_POLL_INTERVAL", cls.interval)
        if interval < 0 or (interval == 0 and max_attempts is None):
            interval = cls.interval
        if max_wait is None and max_attempts is None:
            # Never poll without a bound.
            max_wait = cls.max_wait
        return cls(
            interval=interval,
            max_wait=max_wait,
            max_attempts=max_attempts,
            ready_status=_int_env("DEPLOYREADY_READY_STATUS", cls.ready_status),
        )


@dataclass
class DeploySettings:
    """Provisioning defaults: where Terraform lives and which region it targets."""

    region: str = "us-east-1"
    working_dir: str = "01-website"
    terraform_bin: str = "terraform"
    aws_bin: str = "aws"
    required_commands: tuple[str, ...] = DEFAULT_REQUIRED_COMMANDS
    domain_variable: str = "domain_name"
    host_prefix: str = "www."
    command_timeout: float | None = None

    @classmethod
    def from_env(cls) -> "DeploySettings":
        return cls(
            region=os.getenv("DEPLOYREADY_REGION", cls.region),
            working_dir=os.getenv("DEPLOYREADY_WORKING_DIR", cls.working_dir),
            terraform_bin=os.getenv("DEPLOYREADY_TERRAFORM_BIN", cls.terraform_bin),
            aws_bin=os.getenv("DEPLOYREADY_AWS_BIN", cls.aws_bin),
            required_commands=_list_env("DEPLOYREADY_REQUIRED_COMMANDS", DEFAULT_REQUIRED_COMMANDS),
            domain_variable=os.getenv("DEPLOYREADY_DOMAIN_VARIABLE", cls.domain_variable),
            host_prefix=os.getenv("DEPLOYREADY_HOST_PREFIX", cls.host_prefix),
            command_timeout=_optional_float_env("DEPLOYREADY_COMMAND_TIMEOUT", cls.command_timeout),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def load_poll_settings() -> PollSettings:
    """Load polling settings from environment with sensible defaults."""
    return PollSettings.from_env()


def load_deploy_settings() -> DeploySettings:
    """Load provisioning settings from environment with sensible defaults."""
    return DeploySettings.from_env()
