"""ApiClient - Sends IssuuRequests and returns IssuuResponse envelopes.

Every call is one descriptor in, one envelope out. Transport failures,
unreadable payloads and HTTP error statuses all come back as envelopes;
only cancellation propagates to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from issuu_client.models import IssuuRequest, IssuuResponse, IssuuSettings
from issuu_client.query import resolve_uri
from issuu_client.request_builder import build_http_request, request_uri
from issuu_client.transformer import (
    CollectionMapper,
    ResponseMapper,
    SingleMapper,
    error_from_exception,
    transform_response,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Status code reported when no response was received
NO_RESPONSE_STATUS = 0


@dataclass(frozen=True)
class TransportOutcome:
    """Result of handing a request to the transport: a response or an exception."""

    response: httpx.Response | None = None
    exception: Exception | None = None


class ApiClient:
    """Base client that runs the request/response pipeline.

    data is validated against data_type by the response mapper. The envelope
    itself is built as IssuuResponse[Any], so the [T] in return annotations
    is for type checkers only.

    Usage:
        async with httpx.AsyncClient() as http:
            client = ApiClient(http, settings)
            result = await client.fetch_single(request, Document)
            if result.is_success:
                print(result.data.slug)
    """

    def __init__(self, http: httpx.AsyncClient, settings: IssuuSettings) -> None:
        self._http = http
        self._settings = settings

    @property
    def settings(self) -> IssuuSettings:
        return self._settings

    async def send(self, request: IssuuRequest) -> IssuuResponse[None]:
        """Send a request whose response carries no data (e.g. DELETE)."""
        return await self._execute(request, None)

    async def fetch_single(self, request: IssuuRequest, data_type: type[T] | Any) -> IssuuResponse[T]:
        """Send a request and parse the body as one data_type value."""
        return await self._execute(request, SingleMapper(data_type))

    async def fetch_many(self, request: IssuuRequest, data_type: type[T] | Any) -> IssuuResponse[T]:
        """Send a request to a list endpoint.

        data_type describes the "results" field, e.g. list[Document].
        Pagination metadata uses request.page, never the server's page.
        """
        return await self._execute(request, CollectionMapper(data_type))

    async def _dispatch(self, http_request: httpx.Request) -> TransportOutcome:
        """Hand the request to the transport, capturing any failure."""
        try:
            response = await self._http.send(http_request)
        except httpx.HTTPError as e:
            return TransportOutcome(exception=e)
        return TransportOutcome(response=response)

    async def _execute(
        self,
        request: IssuuRequest,
        mapper: ResponseMapper | None,
    ) -> IssuuResponse[Any]:
        """Run one call through build, dispatch, transform and capture."""
        uri = resolve_uri(self._settings.base_url, request.resource)
        http_request: httpx.Request | None = None
        http_response: httpx.Response | None = None

        try:
            uri = request_uri(request, self._settings)
            http_request = build_http_request(request, self._settings)
            logger.debug("%s %s", request.method.value, uri)

            outcome = await self._dispatch(http_request)
            if outcome.exception is not None:
                logger.warning(
                    "%s %s failed before a response was received: %s",
                    request.method.value, uri, outcome.exception,
                )
                return self._failed(request, uri, outcome.exception, http_request, None)

            http_response = outcome.response
            logger.debug("%s %s -> %d", request.method.value, uri, http_response.status_code)

            transformed = transform_response(
                request.method, uri, http_response, mapper, page=request.page
            )
            return self._capture(transformed, http_request, http_response)
        except Exception as e:
            logger.warning("%s %s could not be completed: %s", request.method.value, uri, e)
            return self._failed(request, uri, e, http_request, http_response)

    def _failed(
        self,
        request: IssuuRequest,
        uri: str,
        exc: Exception,
        http_request: httpx.Request | None,
        http_response: httpx.Response | None,
    ) -> IssuuResponse[Any]:
        """Convert an exception into a status-0 envelope."""
        response = IssuuResponse[Any](
            method=request.method,
            request_uri=uri,
            is_success=False,
            status_code=NO_RESPONSE_STATUS,
            error=error_from_exception(exc),
        )
        return self._capture(response, http_request, http_response)

    def _capture(
        self,
        response: IssuuResponse[Any],
        http_request: httpx.Request | None,
        http_response: httpx.Response | None,
    ) -> IssuuResponse[Any]:
        """Attach raw bodies when capture is enabled.

        Bodies are already buffered by the time this runs, so reading them
        here does not interfere with typed parsing.
        """
        update: dict[str, str] = {}
        if self._settings.capture_request_content and http_request is not None:
            content = _buffered_content(http_request)
            if content is not None:
                update["request_content"] = content
        if self._settings.capture_response_content and http_response is not None:
            content = _buffered_content(http_response)
            if content is not None:
                update["response_content"] = content
        if not update:
            return response
        return response.model_copy(update=update)


def _buffered_content(message: httpx.Request | httpx.Response) -> str | None:
    """Decode an already-read body. Unread bodies and bodyless requests give None."""
    try:
        content = message.content
    except (httpx.RequestNotRead, httpx.ResponseNotRead):
        return None
    if isinstance(message, httpx.Response):
        return message.text
    if not content:
        return None
    return content.decode("utf-8", errors="replace")
