"""Tests for the ApiClient call pipeline.

Tests cover:
- Success envelopes for single values, list envelopes and bodyless calls
- Transport failures and unreadable payloads as status-0 envelopes
- Diagnostics capture gated by settings
- Cancellation propagating to the caller
- Logging never includes the token
"""

import asyncio
import logging

import httpx
import pytest
import pytest_asyncio

from issuu_client.api_client import NO_RESPONSE_STATUS, ApiClient
from issuu_client.models import HttpMethod, IssuuRequest, UploadPayload
from issuu_client.primitives import Document, PublishRequest, PublishResult
from tests.conftest import TOKEN, RecordingHandler, make_settings


@pytest_asyncio.fixture
async def http(handler):
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


def make_client(http: httpx.AsyncClient, **settings_overrides) -> ApiClient:
    return ApiClient(http, make_settings(**settings_overrides))


class TestSuccessfulCalls:
    @pytest.mark.asyncio
    async def test_fetch_single(self, http, handler: RecordingHandler):
        handler.reply(200, {"slug": "abc", "state": "DRAFT"})
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/abc")

        response = await make_client(http).fetch_single(request, Document)

        assert response.is_success is True
        assert response.status_code == 200
        assert response.method is HttpMethod.GET
        assert response.request_uri == "https://api.example.com/v2/drafts/abc"
        assert response.data.slug == "abc"
        assert handler.last.headers["Authorization"] == f"Bearer {TOKEN}"

    @pytest.mark.asyncio
    async def test_fetch_many_uses_requested_page(self, http, handler: RecordingHandler):
        handler.reply(200, {"count": 57, "pageSize": 20, "page": 7, "results": [{"slug": "a"}]})
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts", page=2, size=20)

        response = await make_client(http).fetch_many(request, list[Document])

        assert response.request_uri == "https://api.example.com/v2/drafts?page=2&size=20"
        assert response.meta.page == 2
        assert response.meta.total_pages == 3
        assert str(handler.last.url) == "https://api.example.com/v2/drafts?page=2&size=20"

    @pytest.mark.asyncio
    async def test_send_without_data(self, http, handler: RecordingHandler):
        handler.reply(204)
        request = IssuuRequest(method=HttpMethod.DELETE, resource="/drafts/abc")

        response = await make_client(http).send(request)

        assert response.is_success is True
        assert response.status_code == 204
        assert response.data is None
        assert handler.last.method == "DELETE"

    @pytest.mark.asyncio
    async def test_error_status(self, http, handler: RecordingHandler):
        handler.reply(404, {"message": "Document not found"})
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/missing")

        response = await make_client(http).fetch_single(request, Document)

        assert response.is_success is False
        assert response.status_code == 404
        assert response.data is None
        assert response.error.message == "Document not found"
        assert response.error.exception is None


class TestFailedCalls:
    @pytest.mark.asyncio
    async def test_network_failure(self, http, handler: RecordingHandler):
        handler.fail(httpx.ConnectError("connection refused"))
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts", page=1)

        response = await make_client(http).fetch_many(request, list[Document])

        assert response.is_success is False
        assert response.status_code == NO_RESPONSE_STATUS
        assert response.request_uri == "https://api.example.com/v2/drafts?page=1"
        assert isinstance(response.error.exception, httpx.ConnectError)
        assert response.error.message == "connection refused"
        assert response.rate_limiting is None

    @pytest.mark.asyncio
    async def test_timeout(self, http, handler: RecordingHandler):
        handler.fail(httpx.ReadTimeout("timed out"))
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/abc")

        response = await make_client(http).fetch_single(request, Document)

        assert response.status_code == 0
        assert isinstance(response.error.exception, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_unreadable_success_payload(self, http, handler: RecordingHandler):
        handler.reply(200, content="not json")
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/abc")

        response = await make_client(http).fetch_single(request, Document)

        assert response.is_success is False
        assert response.status_code == 0
        assert response.data is None
        assert response.error.exception is not None

    @pytest.mark.asyncio
    async def test_unreadable_upload_never_reaches_transport(self, http, handler: RecordingHandler, tmp_path):
        request = IssuuRequest(
            method=HttpMethod.PATCH,
            resource="/drafts/abc/upload",
            upload=UploadPayload(file_path=tmp_path / "missing.pdf"),
            use_multipart_content=True,
        )

        response = await make_client(http).fetch_single(request, Document)

        assert response.status_code == 0
        assert isinstance(response.error.exception, FileNotFoundError)
        assert response.request_uri == "https://api.example.com/v2/drafts/abc/upload"
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, http, handler: RecordingHandler):
        handler.fail(asyncio.CancelledError())
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/abc")

        with pytest.raises(asyncio.CancelledError):
            await make_client(http).fetch_single(request, Document)


class TestDiagnosticsCapture:
    @pytest.mark.asyncio
    async def test_capture_disabled_by_default(self, http, handler: RecordingHandler):
        handler.reply(200, {"publicLocation": "p", "location": "l"})
        request = IssuuRequest(
            method=HttpMethod.POST,
            resource="/drafts/abc/publish",
            data=PublishRequest(desired_name="x"),
        )

        response = await make_client(http).fetch_single(request, PublishResult)

        assert response.request_content is None
        assert response.response_content is None

    @pytest.mark.asyncio
    async def test_capture_both_bodies(self, http, handler: RecordingHandler):
        handler.reply(200, {"publicLocation": "p", "location": "l"})
        request = IssuuRequest(
            method=HttpMethod.POST,
            resource="/drafts/abc/publish",
            data=PublishRequest(desired_name="x"),
        )
        client = make_client(http, capture_request_content=True, capture_response_content=True)

        response = await client.fetch_single(request, PublishResult)

        assert response.data.public_location == "p"
        assert '"desiredName"' in response.request_content
        assert '"publicLocation"' in response.response_content

    @pytest.mark.asyncio
    async def test_capture_flags_are_independent(self, http, handler: RecordingHandler):
        handler.reply(200, {"publicLocation": "p", "location": "l"})
        request = IssuuRequest(
            method=HttpMethod.POST,
            resource="/drafts/abc/publish",
            data=PublishRequest(desired_name="x"),
        )
        client = make_client(http, capture_response_content=True)

        response = await client.fetch_single(request, PublishResult)

        assert response.request_content is None
        assert response.response_content is not None

    @pytest.mark.asyncio
    async def test_bodyless_request_not_captured(self, http, handler: RecordingHandler):
        handler.reply(200, {"slug": "abc"})
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/abc")
        client = make_client(http, capture_request_content=True)

        response = await client.fetch_single(request, Document)

        assert response.request_content is None

    @pytest.mark.asyncio
    async def test_capture_on_error_status(self, http, handler: RecordingHandler):
        handler.reply(400, {"message": "Bad"})
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/abc")
        client = make_client(http, capture_response_content=True)

        response = await client.fetch_single(request, Document)

        assert response.is_success is False
        assert '"Bad"' in response.response_content

    @pytest.mark.asyncio
    async def test_capture_on_transport_failure(self, http, handler: RecordingHandler):
        handler.fail(httpx.ConnectError("refused"))
        request = IssuuRequest(
            method=HttpMethod.POST,
            resource="/drafts/abc/publish",
            data=PublishRequest(desired_name="x"),
        )
        client = make_client(http, capture_request_content=True, capture_response_content=True)

        response = await client.fetch_single(request, PublishResult)

        assert response.status_code == 0
        assert '"desiredName"' in response.request_content
        assert response.response_content is None

    @pytest.mark.asyncio
    async def test_capture_on_unreadable_payload(self, http, handler: RecordingHandler):
        handler.reply(200, content="not json")
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/abc")
        client = make_client(http, capture_response_content=True)

        response = await client.fetch_single(request, Document)

        assert response.status_code == 0
        assert response.response_content == "not json"


class TestLogging:
    @pytest.mark.asyncio
    async def test_failure_logged_without_token(self, http, handler: RecordingHandler, caplog):
        handler.fail(httpx.ConnectError("refused"))
        request = IssuuRequest(method=HttpMethod.GET, resource="/drafts/abc")

        with caplog.at_level(logging.DEBUG, logger="issuu_client"):
            await make_client(http).fetch_single(request, Document)

        assert "GET https://api.example.com/v2/drafts/abc" in caplog.text
        assert "refused" in caplog.text
        assert TOKEN not in caplog.text
        assert any(record.levelno == logging.WARNING for record in caplog.records)
