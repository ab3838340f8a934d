# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers for readiness targets."""

from __future__ import annotations

from urllib.parse import urlsplit

from ..errors import InvalidTargetError

ALLOWED_SCHEMES = frozenset({"http", "https"})


def validate_target_url(url: object) -> str:
    """
    Return the stripped URL if it is a usable HTTP(S) target.

    Raises InvalidTargetError for empty values, a missing or unsupported scheme,
    or a missing host. No network activity happens here.
    """
    if not isinstance(url, str):
        raise InvalidTargetError(url, "expected a string")
    raw = url.strip()
    if not raw:
        raise InvalidTargetError(url, "empty URL")
    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as exc:
        raise InvalidTargetError(url, str(exc)) from exc
    if not parts.scheme:
        raise InvalidTargetError(url, "missing scheme (expected http:// or https://)")
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidTargetError(url, f"unsupported scheme {parts.scheme!r}")
    if not parts.hostname:
        raise InvalidTargetError(url, "missing host")
    if port == 0:
        raise InvalidTargetError(url, "invalid port 0")
    return raw


def build_site_url(domain: str, *, prefix: str = "www.", scheme: str = "https") -> str:
    """
    Build the public site URL from a bare domain name.

    Example:
      example.com -> https://www.example.com
    """
    host = str(domain or "").strip().strip(".").lower()
    if not host:
        raise InvalidTargetError(domain, "empty domain name")
    if "://" in host or "/" in host:
        raise InvalidTargetError(domain, "expected a bare domain name")
    if prefix and not host.startswith(prefix.lower()):
        host = f"{prefix.lower()}{host}"
    return validate_target_url(f"{scheme}://{host}")


__all__ = ["ALLOWED_SCHEMES", "build_site_url", "validate_target_url"]
