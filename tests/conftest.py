"""Pytest configuration and fixtures for issuu-client tests.

This file provides:
- make_settings / make_http_response: factories with sensible defaults
- RecordingHandler: MockTransport handler that records every request
- Fixtures: a recording handler and an IssuuApiClient wired to it
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio

from issuu_client.client import IssuuApiClient, create_api_client
from issuu_client.models import IssuuSettings

BASE_URL = "https://api.example.com/v2"
TOKEN = "test-token"


def make_settings(**overrides: Any) -> IssuuSettings:
    """Create IssuuSettings pointing at a fake base URL.

    Prefer this over constructing IssuuSettings directly so tests only
    spell out the fields they care about.
    """
    values: dict[str, Any] = {"base_url": BASE_URL, "token": TOKEN}
    values.update(overrides)
    return IssuuSettings(**values)


def make_http_response(
    status_code: int = 200,
    json_body: Any = None,
    content: bytes | str | None = None,
    headers: dict[str, str] | list[tuple[str, str]] | None = None,
    method: str = "GET",
    url: str = f"{BASE_URL}/drafts",
) -> httpx.Response:
    """Create an httpx.Response with either a JSON body or raw content."""
    kwargs: dict[str, Any] = {
        "headers": headers,
        "request": httpx.Request(method, url),
    }
    if json_body is not None:
        kwargs["json"] = json_body
    elif content is not None:
        kwargs["content"] = content
    return httpx.Response(status_code, **kwargs)


def request_json(request: httpx.Request) -> Any:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content)


class RecordingHandler:
    """MockTransport handler that records requests and replies from a queue.

    Usage:
        handler = RecordingHandler()
        handler.reply(200, {"slug": "abc"})
        ... run the client ...
        assert handler.requests[0].url.path == "/v2/drafts/abc"

    With an empty queue every request gets a bare 200.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: list[Callable[[httpx.Request], httpx.Response]] = []

    def reply(
        self,
        status_code: int = 200,
        json_body: Any = None,
        content: bytes | str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            kwargs: dict[str, Any] = {"headers": headers}
            if json_body is not None:
                kwargs["json"] = json_body
            elif content is not None:
                kwargs["content"] = content
            return httpx.Response(status_code, **kwargs)

        self._replies.append(respond)

    def fail(self, exc: BaseException) -> None:
        """Raise exc instead of replying to the next request."""

        def respond(request: httpx.Request) -> httpx.Response:
            raise exc

        self._replies.append(respond)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._replies:
            return self._replies.pop(0)(request)
        return httpx.Response(200)


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def settings() -> IssuuSettings:
    return make_settings()


@pytest_asyncio.fixture
async def api(handler: RecordingHandler, settings: IssuuSettings) -> AsyncGenerator[IssuuApiClient, None]:
    """IssuuApiClient whose transport is the recording handler."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        yield create_api_client(settings, http=http)


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Automatically apply markers based on test location.

    Enables running subsets via:
        pytest -m integration  # only integration tests
        pytest -m unit         # only unit tests
    """
    for item in items:
        test_path = Path(item.fspath)
        if "integration" in test_path.parts:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
