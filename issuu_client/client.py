"""Issuu API client with lazily created resource groups.

Usage:
    async with create_api_client(settings) as api:
        drafts = await api.drafts.get_drafts(page=1, size=20)
        if drafts.is_success:
            for document in drafts.data:
                print(document)
"""

from __future__ import annotations

from threading import Lock
from typing import Any, Callable, TypeVar

import httpx

from issuu_client.api_client import ApiClient
from issuu_client.drafts import DraftOperations
from issuu_client.models import IssuuSettings
from issuu_client.publications import PublicationOperations

G = TypeVar("G")

DRAFTS_GROUP = "drafts"
PUBLICATIONS_GROUP = "publications"


def build_http_client(settings: IssuuSettings, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Create the shared async HTTP client for a settings object.

    transport is only for tests (e.g. httpx.MockTransport).
    """
    kwargs: dict[str, Any] = {
        "headers": {"Accept": "application/json"},
        "timeout": settings.timeout,
    }
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)


class IssuuApiClient(ApiClient):
    """Client for the Issuu v2 API.

    Resource groups are created on first access and reused afterwards. The
    HTTP client is closed by close() only when this client created it.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        settings: IssuuSettings,
        owns_http: bool = False,
    ) -> None:
        super().__init__(http, settings)
        self._owns_http = owns_http
        self._groups: dict[str, Any] = {}
        self._groups_lock = Lock()

    async def __aenter__(self) -> IssuuApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def _group(self, name: str, factory: Callable[[ApiClient], G]) -> G:
        """Return the handle for a resource group, creating it at most once."""
        group = self._groups.get(name)
        if group is None:
            with self._groups_lock:
                group = self._groups.get(name)
                if group is None:
                    group = factory(self)
                    self._groups[name] = group
        return group

    @property
    def drafts(self) -> DraftOperations:
        """Operations for /drafts."""
        return self._group(DRAFTS_GROUP, lambda c: DraftOperations("/drafts", c))

    @property
    def publications(self) -> PublicationOperations:
        """Operations for /publications."""
        return self._group(PUBLICATIONS_GROUP, lambda c: PublicationOperations("/publications", c))


def create_api_client(
    settings: IssuuSettings,
    http: httpx.AsyncClient | None = None,
) -> IssuuApiClient:
    """Create an IssuuApiClient.

    When http is None a new AsyncClient is built and closed with the API
    client. A caller-supplied client is left open.
    """
    if http is None:
        return IssuuApiClient(build_http_client(settings), settings, owns_http=True)
    return IssuuApiClient(http, settings)
