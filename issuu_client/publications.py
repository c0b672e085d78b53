"""Operations for the /publications resource group."""

from __future__ import annotations

from issuu_client.api_client import ApiClient
from issuu_client.drafts import require_slug
from issuu_client.models import HttpMethod, IssuuRequest, IssuuResponse
from issuu_client.primitives import (
    AssetResult,
    AssetType,
    DisplaySettings,
    Document,
    EmbedResult,
    EmbedSettings,
    QrDisplaySettings,
    QrShareResult,
    ShareResult,
)
from issuu_client.transformer import first_inner


class PublicationOperations:
    """Operations for /publications.

    Obtain through IssuuApiClient.publications rather than constructing directly.
    """

    def __init__(self, path: str, client: ApiClient) -> None:
        self._path = path
        self._client = client

    async def delete_publication(self, slug: str) -> IssuuResponse[None]:
        """DELETE /publications/{slug}"""
        require_slug(slug)
        request = IssuuRequest(method=HttpMethod.DELETE, resource=f"{self._path}/{slug}")
        return await self._client.send(request)

    async def get_publication(self, slug: str) -> IssuuResponse[Document]:
        """GET /publications/{slug}"""
        require_slug(slug)
        request = IssuuRequest(method=HttpMethod.GET, resource=f"{self._path}/{slug}")
        return await self._client.fetch_single(request, Document)

    async def get_publication_assets(
        self,
        slug: str,
        asset_type: AssetType,
        document_page_number: int | None = None,
        page: int | None = None,
        size: int | None = None,
    ) -> IssuuResponse[list[AssetResult]]:
        """GET /publications/{slug}/assets

        Cover assets arrive as a list of lists; the first inner list is
        returned so every asset type has the same result shape.
        """
        require_slug(slug)
        asset_type = AssetType(asset_type)
        request = IssuuRequest(
            method=HttpMethod.GET,
            resource=f"{self._path}/{slug}/assets",
            query={
                "assetType": asset_type.wire_value,
                "documentPageNumber": (
                    str(document_page_number) if document_page_number is not None else None
                ),
            },
            page=page,
            size=size,
        )

        if asset_type is not AssetType.COVER:
            return await self._client.fetch_many(request, list[AssetResult])

        result = await self._client.fetch_many(request, list[list[AssetResult]])
        return first_inner(result)

    async def get_publication_embed(
        self,
        slug: str,
        settings: EmbedSettings | None = None,
    ) -> IssuuResponse[EmbedResult]:
        """GET /publications/{slug}/embed"""
        require_slug(slug)
        settings = settings or EmbedSettings()
        request = IssuuRequest(
            method=HttpMethod.GET,
            resource=f"{self._path}/{slug}/embed",
            query={
                "responsive": _flag(settings.responsive),
                "width": settings.width,
                "height": settings.height,
                "hideIssuuLogo": _flag(settings.hide_issuu_logo),
                "hideShareButton": _flag(settings.hide_share_button),
                "showOtherPublications": _flag(settings.show_other_publications),
            },
        )
        return await self._client.fetch_single(request, EmbedResult)

    async def get_publication_fullscreen_share(
        self,
        slug: str,
        settings: DisplaySettings | None = None,
    ) -> IssuuResponse[ShareResult]:
        """POST /publications/{slug}/fullscreen"""
        require_slug(slug)
        request = IssuuRequest(
            method=HttpMethod.POST,
            resource=f"{self._path}/{slug}/fullscreen",
            data=settings or DisplaySettings(),
        )
        return await self._client.fetch_single(request, ShareResult)

    async def get_publication_reader_share(self, slug: str) -> IssuuResponse[ShareResult]:
        """GET /publications/{slug}/reader"""
        require_slug(slug)
        request = IssuuRequest(method=HttpMethod.GET, resource=f"{self._path}/{slug}/reader")
        return await self._client.fetch_single(request, ShareResult)

    async def get_publication_qr_code(
        self,
        slug: str,
        settings: QrDisplaySettings | None = None,
    ) -> IssuuResponse[QrShareResult]:
        """POST /publications/{slug}/qrcode"""
        require_slug(slug)
        request = IssuuRequest(
            method=HttpMethod.POST,
            resource=f"{self._path}/{slug}/qrcode",
            data=settings or QrDisplaySettings(),
        )
        return await self._client.fetch_single(request, QrShareResult)

    async def get_publications(
        self,
        page: int | None = None,
        size: int | None = None,
    ) -> IssuuResponse[list[Document]]:
        """GET /publications"""
        request = IssuuRequest(method=HttpMethod.GET, resource=self._path, page=page, size=size)
        return await self._client.fetch_many(request, list[Document])


def _flag(value: bool) -> str:
    return "true" if value else "false"
