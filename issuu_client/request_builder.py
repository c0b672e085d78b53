"""Request Builder - Turns IssuuRequest descriptors into httpx requests.

Resolves the final URI, attaches the bearer token, and encodes the body as
JSON or multipart form data.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel

from issuu_client.models import IssuuRequest, IssuuSettings, UploadPayload
from issuu_client.query import build_query, resolve_uri

UPLOAD_PART_NAME = "file"


def request_uri(request: IssuuRequest, settings: IssuuSettings) -> str:
    """Resolve the absolute URI for a request, including page/size."""
    query_string = build_query(request.query, request.page, request.size)
    return resolve_uri(settings.base_url, request.resource, query_string)


def serialize_payload(data: Any) -> Any:
    """Apply the JSON serialization policy: camelCase aliases, no nulls.

    Pydantic models are dumped by alias. Plain containers are walked so
    nested models and None values are handled the same way.
    """
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(data, dict):
        return {
            key: serialize_payload(value)
            for key, value in data.items()
            if value is not None
        }
    if isinstance(data, (list, tuple)):
        return [serialize_payload(item) for item in data]
    return data


def _upload_part(upload: UploadPayload) -> tuple[str, Any]:
    """Build the (filename, content) tuple for the "file" part."""
    if upload.file_path is not None:
        # Read now so the body can be replayed for diagnostics capture
        return upload.resolved_filename, upload.file_path.read_bytes()
    if upload.stream is not None:
        return upload.resolved_filename, upload.stream
    return upload.resolved_filename, upload.content


def _multipart_files(request: IssuuRequest) -> list[tuple[str, Any]]:
    """Form entries as plain parts (no filename), then the upload part."""
    files: list[tuple[str, Any]] = []
    for key, value in (request.form_data or {}).items():
        if value is not None:
            files.append((key, (None, value)))
    if request.upload is not None:
        files.append((UPLOAD_PART_NAME, _upload_part(request.upload)))
    return files


def build_http_request(request: IssuuRequest, settings: IssuuSettings) -> httpx.Request:
    """Assemble the transport request for a descriptor.

    A descriptor with neither multipart content nor a payload produces a
    bodyless request.

    Raises:
        OSError: If an upload path cannot be read.
    """
    headers = {
        "Authorization": f"Bearer {settings.token}",
        "Accept": "application/json",
    }
    url = request_uri(request, settings)

    if request.use_multipart_content:
        files = _multipart_files(request)
        if not files:
            return httpx.Request(request.method.value, url, headers=headers)
        http_request = httpx.Request(request.method.value, url, headers=headers, files=files)
        # Buffer multipart content so it can be re-read after sending
        http_request.read()
        return http_request

    if request.data is not None:
        return httpx.Request(
            request.method.value,
            url,
            headers=headers,
            json=serialize_payload(request.data),
        )

    return httpx.Request(request.method.value, url, headers=headers)
