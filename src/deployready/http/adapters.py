# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Programmable HttpClient implementations for tests and dry runs."""

from __future__ import annotations

from collections.abc import Iterable

from .client import AsyncHttpClient, HttpClient
from .models import HttpRequest, HttpResponse


def status_response(status_code: int, *, url: str | None = None) -> HttpResponse:
    """Shorthand for a response that received a status code."""
    return HttpResponse(ok=True, status_code=status_code, url=url)


class StubHttpClient(HttpClient):
    """
    Deterministic HttpClient that replays queued responses.

    Once the queue is drained the last response is repeated, so a stub built from
    ``[503, 200]`` keeps answering 200. Integers are shorthand for status responses;
    exceptions are converted the same way the httpx client converts them.
    """

    def __init__(self, responses: Iterable[HttpResponse | int | BaseException] | None = None):
        self._responses: list[HttpResponse | int | BaseException] = list(responses or [])
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, response: HttpResponse | int | BaseException) -> None:
        self._responses.append(response)

    def _next(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if not self._responses:
            return HttpResponse(ok=False, url=request.url, error_message="No stubbed response configured")
        index = min(len(self.requests) - 1, len(self._responses) - 1)
        item = self._responses[index]
        if isinstance(item, BaseException):
            return HttpResponse.from_exception(item, url=request.url)
        if isinstance(item, int):
            return status_response(item, url=request.url)
        return item

    def request(self, request: HttpRequest) -> HttpResponse:
        return self._next(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def close(self) -> None:
        self.closed = True


class AsyncStubHttpClient(AsyncHttpClient):
    """Async wrapper around StubHttpClient sharing the same replay semantics."""

    def __init__(self, responses: Iterable[HttpResponse | int | BaseException] | None = None):
        self._stub = StubHttpClient(responses)
        self.closed = False

    @property
    def requests(self) -> list[HttpRequest]:
        return self._stub.requests

    @property
    def calls(self) -> int:
        return self._stub.calls

    async def request(self, request: HttpRequest) -> HttpResponse:
        return self._stub.request(request)

    async def aclose(self) -> None:
        self.closed = True


__all__ = ["AsyncStubHttpClient", "StubHttpClient", "status_response"]
