"""Internal data models for issuu-client.

All models use Pydantic v2. Request descriptors, response envelopes and
settings live here; Issuu resource shapes live in primitives.py.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from issuu_client.primitives import DocumentAccess

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.issuu.com/v2"


# =============================================================================
# Request Models
# =============================================================================


class HttpMethod(str, Enum):
    """HTTP methods used by the Issuu API."""

    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"


# Methods that may carry a typed payload
_WRITE_METHODS = {HttpMethod.POST, HttpMethod.PATCH}


class UploadPayload(BaseModel):
    """A file to upload as the "file" part of a multipart request.

    Exactly one source is set: a path on disk, an open binary stream, or
    in-memory bytes. Streams and bytes carry no name of their own, so they
    need an explicit filename.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    file_path: Path | None = Field(default=None, description="File on disk")
    stream: Any = Field(default=None, description="Open binary stream (anything with read())")
    content: bytes | None = Field(default=None, description="In-memory file content")
    filename: str | None = Field(default=None, description="Filename sent with the part")

    @field_validator("stream")
    @classmethod
    def validate_stream(cls, v: Any) -> Any:
        if v is not None and not callable(getattr(v, "read", None)):
            raise ValueError("stream must be a readable binary file object")
        return v

    @model_validator(mode="after")
    def check_single_source(self) -> Self:
        sources = [s for s in (self.file_path, self.stream, self.content) if s is not None]
        if len(sources) != 1:
            raise ValueError("exactly one of file_path, stream or content is required")
        if self.file_path is None and not self.filename:
            raise ValueError("filename is required for stream and content uploads")
        return self

    @property
    def resolved_filename(self) -> str:
        """Explicit filename, else the base name of file_path."""
        if self.filename:
            return self.filename
        return self.file_path.name


class IssuuRequest(BaseModel):
    """One call to an Issuu API resource.

    Query and form values may be None; those pairs are skipped when the
    request is assembled. Dict insertion order is the order parameters are
    rendered in.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    method: HttpMethod = Field(description="HTTP method")
    resource: str = Field(description="Relative resource path, e.g. /drafts/abc")
    query: dict[str, str | None] | None = Field(default=None, description="Ordered query parameters")
    data: Any = Field(default=None, description="Typed payload, serialized as JSON")
    page: int | None = Field(default=None, ge=1, description="Page to fetch")
    size: int | None = Field(default=None, ge=1, description="Page size to fetch")
    form_data: dict[str, str | None] | None = Field(
        default=None, description="Multipart form entries"
    )
    upload: UploadPayload | None = Field(default=None, description="File to upload")
    use_multipart_content: bool = Field(default=False, description="Encode body as multipart")

    @field_validator("resource")
    @classmethod
    def validate_resource(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("resource must start with '/'")
        return v

    @model_validator(mode="after")
    def check_payload_method(self) -> Self:
        if self.data is not None and self.method not in _WRITE_METHODS:
            raise ValueError(f"{self.method.value} requests cannot carry a payload")
        if self.upload is not None and not self.use_multipart_content:
            raise ValueError("upload requires use_multipart_content")
        return self


# =============================================================================
# Response Models
# =============================================================================


class Meta(BaseModel):
    """Pagination metadata for list responses."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    page: int = Field(description="Page the caller asked for (1 if unspecified)")
    page_size: int = Field(description="Items per page")
    total_items: int = Field(description="Total items across all pages")
    total_pages: int = Field(description="ceil(total_items / page_size)")


class RateLimiting(BaseModel):
    """Rate-limit telemetry read from x-ratelimit-* response headers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    limit: int = Field(description="Requests allowed in the window")
    remaining: int = Field(description="Requests left in the window")
    reset: datetime = Field(description="When the window resets (UTC)")


class IssuuError(BaseModel):
    """Normalized error for a failed call.

    The underlying exception (if any) is kept for callers but never
    serialized.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    message: str = Field(description="Human-readable message")
    details: dict[str, str] | None = Field(
        default=None, description="Field/detail name -> message"
    )
    exception: BaseException | None = Field(
        default=None, exclude=True, description="Cause, for exception-derived errors"
    )


class IssuuResponse(BaseModel, Generic[T]):
    """Uniform result of one API call.

    status_code is 0 when the request never produced a response (network
    failure, timeout, unreadable payload). Check is_success before trusting
    data.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: HttpMethod = Field(description="HTTP method sent")
    request_uri: str = Field(description="Fully resolved request URI")
    is_success: bool = Field(description="True for 2xx responses")
    status_code: int = Field(description="HTTP status, or 0 if no response was received")
    data: T | None = Field(default=None, description="Typed payload")
    meta: Meta | None = Field(default=None, description="Pagination metadata")
    rate_limiting: RateLimiting | None = Field(default=None, description="Rate-limit snapshot")
    links: dict[str, str] | None = Field(default=None, description="Link name -> URL")
    error: IssuuError | None = Field(default=None, description="Normalized error")
    request_content: str | None = Field(default=None, description="Raw request body")
    response_content: str | None = Field(default=None, description="Raw response body")


# =============================================================================
# Settings
# =============================================================================


class IssuuDefaultSettings(BaseModel):
    """Defaults applied to new documents."""

    model_config = ConfigDict(extra="forbid")

    access: DocumentAccess = Field(default=DocumentAccess.PRIVATE, description="Document access")
    downloadable: bool = Field(default=False, description="Document is downloadable")
    preview: bool = Field(default=False, description="Document previews larger content")
    show_detected_links: bool = Field(default=False, description="Show detected links when published")


class IssuuSettings(BaseModel):
    """Settings for talking to the Issuu API."""

    model_config = ConfigDict(extra="forbid")

    base_url: str = Field(default=DEFAULT_BASE_URL, description="API base URL")
    token: str = Field(description="Bearer token, sent verbatim")
    capture_request_content: bool = Field(
        default=False, description="Attach raw request bodies to responses"
    )
    capture_response_content: bool = Field(
        default=False, description="Attach raw response bodies to responses"
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    default_settings: IssuuDefaultSettings = Field(
        default_factory=IssuuDefaultSettings, description="Defaults for new documents"
    )

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("token must not be empty")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return v
