# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used by readiness probes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import ErrorCategory, categorize_exception

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "HEAD"
    headers: Headers | None = None
    timeout: float | None = None
    allow_redirects: bool = True


@dataclass
class HttpResponse:
    """
    Normalized probe outcome.

    Either a status code was received (``ok=True``) or the transport failed before
    any response arrived (``ok=False`` with ``status_code=None``).
    """

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    error_category: ErrorCategory = ErrorCategory.NONE
    elapsed: float | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def transport_error(self) -> bool:
        return self.status_code is None

    @property
    def status_label(self) -> str:
        """Short label for logs: the status code, or the transport failure kind."""
        if self.status_code is not None:
            return str(self.status_code)
        if self.error_category not in (ErrorCategory.NONE, ErrorCategory.UNKNOWN_ERROR):
            return self.error_category.value
        return self.error_type or "no response"

    @classmethod
    def from_exception(cls, exc: BaseException, *, url: str | None = None) -> HttpResponse:
        return cls(
            ok=False,
            url=url,
            error_message=str(exc),
            error_type=type(exc).__name__,
            error_category=categorize_exception(exc),
        )


__all__ = ["Headers", "HttpRequest", "HttpResponse"]
