# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import AsyncStubHttpClient, StubHttpClient, status_response
from .client import (
    AsyncHttpClient,
    HttpClient,
    create_default_async_http_client,
    create_default_http_client,
)
from .httpx_client import AsyncHttpxClient, HttpxClient
from .models import Headers, HttpRequest, HttpResponse
from .url import build_site_url, validate_target_url

__all__ = [
    "AsyncHttpClient",
    "AsyncHttpxClient",
    "AsyncStubHttpClient",
    "Headers",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "build_site_url",
    "create_default_async_http_client",
    "create_default_http_client",
    "status_response",
    "validate_target_url",
]
