# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .environment.models import EnvironmentReport
    from .models.poll import PollResult


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


_SSL_MARKERS = ("ssl", "certificate", "tls", "handshake")
_DNS_MARKERS = ("name or service not known", "nodename nor servname", "getaddrinfo", "name resolution", "no address associated")


def _walk_causes(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps the underlying socket/ssl errors, so the cause chain and the
    message are inspected before falling back to the httpx class itself.
    """
    chain = _walk_causes(exc)

    for item in chain:
        if isinstance(item, (ssl_module.SSLError, ssl_module.CertificateError)):
            return ErrorCategory.SSL_ERROR
        if isinstance(item, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    message = " ".join(str(item) for item in chain).lower()
    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError, httpx.RemoteProtocolError, httpx.ProxyError)):
        if any(marker in message for marker in _SSL_MARKERS):
            return ErrorCategory.SSL_ERROR
        if any(marker in message for marker in _DNS_MARKERS):
            return ErrorCategory.DNS_ERROR
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (socket.timeout, TimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout during probe",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.UNKNOWN_ERROR: "Network error during probe",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Probe failed due to network error")


class DeployReadyError(Exception):
    """Base class for errors surfaced to DeployReady callers."""


class InvalidTargetError(DeployReadyError, ValueError):
    """The readiness target is not a usable HTTP(S) URL."""

    def __init__(self, url: object, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid target URL {url!r}: {reason}")


class ReadinessTimeoutError(DeployReadyError):
    """The readiness bound was exhausted before the target became ready."""

    def __init__(self, result: PollResult):
        self.result = result
        super().__init__(
            f"{result.url} not ready after {result.attempts} attempt(s) and {result.elapsed:.1f}s"
            f" (last status: {result.last_status_label})"
        )


class EnvironmentCheckError(DeployReadyError):
    """One or more environment prerequisites are missing."""

    def __init__(self, report: EnvironmentReport):
        self.report = report
        failed = ", ".join(check.name for check in report.failures) or "unknown"
        super().__init__(f"Environment check failed: {failed}")


class CommandError(DeployReadyError):
    """An external command exited unsuccessfully."""

    def __init__(self, args: Sequence[str], returncode: int | None, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        code = "timed out" if returncode is None else f"exit code {returncode}"
        message = f"Command {' '.join(self.args_list)!r} failed ({code})"
        super().__init__(f"{message}: {detail}" if detail else message)


class TargetResolutionError(DeployReadyError):
    """The readiness target could not be derived from infrastructure state."""


__all__ = [
    "CommandError",
    "DeployReadyError",
    "EnvironmentCheckError",
    "ErrorCategory",
    "InvalidTargetError",
    "ReadinessTimeoutError",
    "TargetResolutionError",
    "categorize_exception",
    "error_category_to_reason",
]
