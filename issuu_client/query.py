"""Resource path and query string building.

Query strings are rendered in insertion order so the same request always
produces the same URI.
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote


def _format_value(value: Any) -> str:
    """Render a query value. Booleans use the API's lowercase spelling."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class QueryStringBuilder:
    """Builds an ordered, percent-encoded query string.

    Each add_parameter call returns a new builder, so a partially built query
    can be shared and extended safely.

    Usage:
        query = (
            QueryStringBuilder()
            .add_parameter("assetType", "cover1")
            .add_parameter("documentPageNumber", None)  # skipped
            .build()
        )
        # "?assetType=cover1"
    """

    def __init__(self, pairs: Mapping[str, Any] | None = None) -> None:
        self._pairs: dict[str, str] = {}
        for key, value in (pairs or {}).items():
            self._add(key, value)

    def _add(self, key: str, value: Any) -> None:
        if value is None:
            return
        if key in self._pairs:
            raise ValueError(f"Duplicate query parameter '{key}'")
        self._pairs[key] = _format_value(value)

    def add_parameter(self, key: str, value: Any) -> QueryStringBuilder:
        """Return a new builder with key=value appended. None values are skipped."""
        builder = QueryStringBuilder()
        builder._pairs = dict(self._pairs)
        builder._add(key, value)
        return builder

    @property
    def has_query(self) -> bool:
        return bool(self._pairs)

    @property
    def pairs(self) -> dict[str, str]:
        return dict(self._pairs)

    def build(self) -> str:
        """Render as "?k=v&k2=v2", or "" when no pairs survived."""
        if not self._pairs:
            return ""
        return "?" + "&".join(
            f"{quote(key, safe='')}={quote(value, safe='')}"
            for key, value in self._pairs.items()
        )


def build_query(
    query: Mapping[str, Any] | None,
    page: int | None = None,
    size: int | None = None,
) -> str:
    """Render explicit query pairs followed by page and size."""
    return (
        QueryStringBuilder(query)
        .add_parameter("page", page)
        .add_parameter("size", size)
        .build()
    )


def combine_paths(parent: str, child: str) -> str:
    """Join two path segments with exactly one slash between them.

    One trailing slash is trimmed from parent and one leading slash from
    child. If either side is empty they are simply concatenated.
    """
    if parent and child:
        if parent.endswith("/"):
            parent = parent[:-1]
        if child.startswith("/"):
            child = child[1:]
        return f"{parent}/{child}"
    return parent + child


def resolve_uri(base_url: str, resource: str, query_string: str = "") -> str:
    """Resolve resource (plus an already-rendered query) against base_url.

    The base URL's own path is kept: "https://api.issuu.com/v2" + "/drafts"
    gives "https://api.issuu.com/v2/drafts".
    """
    return combine_paths(base_url, resource) + query_string
