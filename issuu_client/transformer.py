"""Transformer - Converts httpx responses into IssuuResponse envelopes.

Success responses are mapped to typed data (plus pagination and links for
list endpoints). Failure responses are parsed into a normalized IssuuError.
Rate-limit headers are read either way.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Mapping, Protocol, TypeVar

import httpx
from pydantic import TypeAdapter

from issuu_client.models import (
    HttpMethod,
    IssuuError,
    IssuuResponse,
    Meta,
    RateLimiting,
)

T = TypeVar("T")

NO_ERROR_MESSAGE = "No error message was returned."
UNKNOWN_RESPONSE = "An unknown error response was returned."
UNPARSEABLE_ERROR_CONTENT = "Could not parse the error content."

RATE_LIMIT_REMAINING_HEADER = "x-ratelimit-remaining"
RATE_LIMIT_LIMIT_HEADER = "x-ratelimit-limit"
RATE_LIMIT_RESET_HEADER = "x-ratelimit-reset"

# Detail maps in error bodies, in order of precedence
_ERROR_DETAIL_KEYS = ("details", "fields", "errors")


# =============================================================================
# Response Mappers
# =============================================================================


@dataclass(frozen=True)
class MappedContent:
    """What a mapper extracts from a successful response."""

    data: Any = None
    count: int | None = None
    page_size: int | None = None
    links: dict[str, str] | None = None


class ResponseMapper(Protocol):
    def __call__(self, response: httpx.Response) -> MappedContent: ...


class SingleMapper(Generic[T]):
    """Parses the whole response body as one value of the given type."""

    def __init__(self, data_type: type[T] | Any) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(data_type)

    def __call__(self, response: httpx.Response) -> MappedContent:
        if not response.content:
            return MappedContent()
        return MappedContent(data=self._adapter.validate_json(response.content))


class CollectionMapper(Generic[T]):
    """Parses a list envelope: {count?, pageSize?, results, links?}.

    data_type describes "results" (e.g. list[Document]).
    """

    def __init__(self, data_type: type[T] | Any) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(data_type)

    def __call__(self, response: httpx.Response) -> MappedContent:
        if not response.content:
            return MappedContent()

        container = response.json()
        if not isinstance(container, dict):
            raise ValueError(
                f"Expected a JSON object for a list response, got {type(container).__name__}"
            )

        results = container.get("results")
        data = self._adapter.validate_python(results) if results is not None else None

        return MappedContent(
            data=data,
            count=_optional_int(container.get("count"), "count"),
            page_size=_optional_int(container.get("pageSize"), "pageSize"),
            links=_flatten_links(container.get("links")),
        )


def _optional_int(value: Any, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{name}' must be an integer, got {value!r}")
    return value


def _flatten_links(links: Any) -> dict[str, str] | None:
    """Reduce {"next": {"href": url}} to {"next": url}. Empty maps become None."""
    if not isinstance(links, dict) or not links:
        return None
    flattened: dict[str, str] = {}
    for name, link in links.items():
        if isinstance(link, dict) and isinstance(link.get("href"), str):
            flattened[name] = link["href"]
        elif isinstance(link, str):
            flattened[name] = link
    return flattened or None


# =============================================================================
# Pagination
# =============================================================================


def resolve_pagination(count: int, page_size: int, page: int | None = None) -> Meta:
    """Build pagination metadata from a list response's count and pageSize.

    page is what the caller asked for; the server's page number is never
    used. A non-positive page size yields zero pages.
    """
    total_pages = math.ceil(count / page_size) if page_size > 0 else 0
    return Meta(
        page=page or 1,
        page_size=page_size,
        total_items=count,
        total_pages=total_pages,
    )


def first_inner(response: IssuuResponse[Any]) -> IssuuResponse[Any]:
    """Replace list-of-lists data with its first inner list.

    An empty outer list (or no data) becomes None. Every other field is
    carried over unchanged.
    """
    data = response.data
    first = data[0] if data else None
    return response.model_copy(update={"data": first})


# =============================================================================
# Rate Limiting
# =============================================================================


_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

INT32_MAX = 2**31 - 1
INT64_MAX = 2**63 - 1


def _parse_int(value: str | None, maximum: int) -> int | None:
    """Parse a plain decimal header value within [-maximum - 1, maximum]."""
    if value is None:
        return None
    text = value.strip()
    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    result = int(text)
    if not -maximum - 1 <= result <= maximum:
        return None
    return result


def _first_header(headers: Mapping[str, str], name: str) -> str | None:
    """First value of a header; repeated headers are not comma-joined."""
    if isinstance(headers, httpx.Headers):
        values = headers.get_list(name)
        return values[0] if values else None
    return headers.get(name)


def extract_rate_limiting(headers: Mapping[str, str]) -> RateLimiting | None:
    """Read the x-ratelimit-* headers. Returns None unless all three parse."""
    remaining = _parse_int(_first_header(headers, RATE_LIMIT_REMAINING_HEADER), INT32_MAX)
    limit = _parse_int(_first_header(headers, RATE_LIMIT_LIMIT_HEADER), INT32_MAX)
    reset = _parse_int(_first_header(headers, RATE_LIMIT_RESET_HEADER), INT64_MAX)

    if remaining is None or limit is None or reset is None:
        return None

    try:
        reset_at = datetime.fromtimestamp(reset, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None

    return RateLimiting(limit=limit, remaining=remaining, reset=reset_at)


# =============================================================================
# Errors
# =============================================================================


def _detail_message(value: Any) -> str | None:
    """Detail values are {"message": ...} objects, strings or string lists.

    Returns None when the value carries no usable text.
    """
    if isinstance(value, dict):
        message = value.get("message")
        return message if isinstance(message, str) and message else None
    if isinstance(value, list):
        parts = [str(item) for item in value if item is not None and item != ""]
        return "; ".join(parts) or None
    if value is None or value == "":
        return None
    return str(value)


def _error_details(body: dict[str, Any]) -> dict[str, str] | None:
    for key in _ERROR_DETAIL_KEYS:
        detail_map = body.get(key)
        if isinstance(detail_map, dict) and detail_map:
            details = {}
            for name, value in detail_map.items():
                message = _detail_message(value)
                if message is not None:
                    details[name] = message
            return details or None
    return None


def parse_error(response: httpx.Response) -> IssuuError:
    """Normalize a failure response body into an IssuuError.

    Accepts {message, details|fields|errors}. No body gives NO_ERROR_MESSAGE;
    a body that is not a JSON object gives UNPARSEABLE_ERROR_CONTENT with the
    parse exception attached.
    """
    if not response.content:
        return IssuuError(message=NO_ERROR_MESSAGE)

    try:
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError(f"Expected a JSON object, got {type(body).__name__}")
    except ValueError as e:
        return IssuuError(message=UNPARSEABLE_ERROR_CONTENT, exception=e)

    details = _error_details(body)
    message = body.get("message")
    if not isinstance(message, str) or not message:
        return IssuuError(message=UNKNOWN_RESPONSE, details=details)
    return IssuuError(message=message, details=details)


def error_from_exception(exc: BaseException) -> IssuuError:
    """Build the error for a call that failed with an exception."""
    return IssuuError(message=str(exc) or type(exc).__name__, exception=exc)


# =============================================================================
# Transform
# =============================================================================


def transform_response(
    method: HttpMethod,
    uri: str,
    response: httpx.Response,
    mapper: ResponseMapper | None = None,
    page: int | None = None,
) -> IssuuResponse[Any]:
    """Build the envelope for a response that was received.

    Mapping errors on a 2xx response propagate; the caller converts them
    into a status-0 envelope.
    """
    rate_limiting = extract_rate_limiting(response.headers)

    if not response.is_success:
        return IssuuResponse[Any](
            method=method,
            request_uri=uri,
            is_success=False,
            status_code=response.status_code,
            rate_limiting=rate_limiting,
            error=parse_error(response),
        )

    mapped = mapper(response) if mapper is not None else MappedContent()

    meta = None
    if mapped.count is not None and mapped.page_size is not None:
        meta = resolve_pagination(mapped.count, mapped.page_size, page)

    return IssuuResponse[Any](
        method=method,
        request_uri=uri,
        is_success=True,
        status_code=response.status_code,
        data=mapped.data,
        meta=meta,
        rate_limiting=rate_limiting,
        links=mapped.links,
    )
