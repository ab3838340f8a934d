# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementations."""

from __future__ import annotations

import time

import httpx

from ..config import HttpSettings, load_http_settings
from .client import AsyncHttpClient, HttpClient
from .models import HttpRequest, HttpResponse


def _prepare(settings: HttpSettings, request: HttpRequest) -> tuple[dict[str, str], float]:
    headers = dict(request.headers or {})
    headers.setdefault("User-Agent", settings.user_agent)
    timeout = request.timeout if request.timeout is not None else settings.timeout
    return headers, timeout


def _to_response(resp: httpx.Response, started: float) -> HttpResponse:
    return HttpResponse(
        ok=True,
        status_code=resp.status_code,
        headers=dict(resp.headers),
        url=str(resp.url),
        elapsed=time.monotonic() - started,
    )


class HttpxClient(HttpClient):
    """Synchronous httpx client wrapper. The response body is never read."""

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def request(self, request: HttpRequest) -> HttpResponse:
        headers, timeout = _prepare(self.settings, request)
        started = time.monotonic()
        try:
            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=timeout,
                follow_redirects=request.allow_redirects,
            ) as resp:
                return _to_response(resp, started)
        except Exception as exc:  # noqa: BLE001
            response = HttpResponse.from_exception(exc, url=request.url)
            response.elapsed = time.monotonic() - started
            return response

    def close(self) -> None:
        self._client.close()


class AsyncHttpxClient(AsyncHttpClient):
    """Asynchronous httpx client wrapper for callers running an event loop."""

    def __init__(self, settings: HttpSettings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.AsyncClient(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    async def request(self, request: HttpRequest) -> HttpResponse:
        headers, timeout = _prepare(self.settings, request)
        started = time.monotonic()
        try:
            async with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=timeout,
                follow_redirects=request.allow_redirects,
            ) as resp:
                return _to_response(resp, started)
        except Exception as exc:  # noqa: BLE001
            response = HttpResponse.from_exception(exc, url=request.url)
            response.elapsed = time.monotonic() - started
            return response

    async def aclose(self) -> None:
        await self._client.aclose()
