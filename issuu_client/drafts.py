"""Operations for the /drafts resource group."""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path
from typing import BinaryIO

from issuu_client.api_client import ApiClient
from issuu_client.models import HttpMethod, IssuuDefaultSettings, IssuuRequest, IssuuResponse, UploadPayload
from issuu_client.primitives import Document, DocumentType, Draft, DraftInfo, PublishRequest, PublishResult

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase ASCII words joined by hyphens: "Spring Catalogue 2024" -> "spring-catalogue-2024"."""
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG_CHARS.sub("-", ascii_value.lower()).strip("-")


def require_slug(slug: str) -> str:
    """Raise ValueError for a blank slug."""
    if not slug or not slug.strip():
        raise ValueError("slug must not be empty")
    return slug


def draft_with_defaults(
    defaults: IssuuDefaultSettings,
    title: str | None = None,
    description: str | None = None,
    file_url: str | None = None,
    document_type: DocumentType = DocumentType.OTHER,
    confirm_copyright: bool = False,
) -> Draft:
    """Build a Draft whose access and display flags come from settings defaults."""
    return Draft(
        confirm_copyright=confirm_copyright,
        file_url=file_url,
        info=DraftInfo(
            title=title,
            description=description,
            type=document_type,
            access=defaults.access,
            downloadable=defaults.downloadable,
            preview=defaults.preview,
            show_detected_links=defaults.show_detected_links,
        ),
    )


class DraftOperations:
    """Operations for /drafts.

    Obtain through IssuuApiClient.drafts rather than constructing directly.
    """

    def __init__(self, path: str, client: ApiClient) -> None:
        self._path = path
        self._client = client

    async def create_draft(self, draft: Draft) -> IssuuResponse[Document]:
        """POST /drafts"""
        request = IssuuRequest(method=HttpMethod.POST, resource=self._path, data=draft)
        return await self._client.fetch_single(request, Document)

    async def delete_draft(self, slug: str) -> IssuuResponse[None]:
        """DELETE /drafts/{slug}"""
        require_slug(slug)
        request = IssuuRequest(method=HttpMethod.DELETE, resource=f"{self._path}/{slug}")
        return await self._client.send(request)

    async def get_draft(self, slug: str) -> IssuuResponse[Document]:
        """GET /drafts/{slug}"""
        require_slug(slug)
        request = IssuuRequest(method=HttpMethod.GET, resource=f"{self._path}/{slug}")
        return await self._client.fetch_single(request, Document)

    async def get_drafts(
        self,
        page: int | None = None,
        size: int | None = None,
    ) -> IssuuResponse[list[Document]]:
        """GET /drafts"""
        request = IssuuRequest(method=HttpMethod.GET, resource=self._path, page=page, size=size)
        return await self._client.fetch_many(request, list[Document])

    async def publish_draft(
        self,
        slug: str,
        desired_name: str | None = None,
    ) -> IssuuResponse[PublishResult]:
        """POST /drafts/{slug}/publish

        desired_name is slugified before it is sent.
        """
        require_slug(slug)
        if desired_name:
            desired_name = slugify(desired_name)
        request = IssuuRequest(
            method=HttpMethod.POST,
            resource=f"{self._path}/{slug}/publish",
            data=PublishRequest(desired_name=desired_name or None),
        )
        return await self._client.fetch_single(request, PublishResult)

    async def update_draft(self, slug: str, draft: Draft) -> IssuuResponse[Document]:
        """PATCH /drafts/{slug}"""
        require_slug(slug)
        request = IssuuRequest(method=HttpMethod.PATCH, resource=f"{self._path}/{slug}", data=draft)
        return await self._client.fetch_single(request, Document)

    async def upload_document_content(
        self,
        slug: str,
        file_path: Path | str | None = None,
        stream: BinaryIO | None = None,
        filename: str | None = None,
        confirm_copyright: bool = False,
    ) -> IssuuResponse[Document]:
        """PATCH /drafts/{slug}/upload

        Upload either a file on disk (file_path) or an open binary stream
        (stream, with filename).
        """
        require_slug(slug)
        upload = UploadPayload(
            file_path=Path(file_path) if file_path is not None else None,
            stream=stream,
            filename=filename,
        )
        request = IssuuRequest(
            method=HttpMethod.PATCH,
            resource=f"{self._path}/{slug}/upload",
            form_data={"confirmCopyright": "true" if confirm_copyright else "false"},
            upload=upload,
            use_multipart_content=True,
        )
        return await self._client.fetch_single(request, Document)
