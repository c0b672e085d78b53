"""Issuu resource shapes.

Field names are snake_case in Python and camelCase on the wire. Inbound
models ignore fields they do not know about so new API fields do not break
parsing; outbound models are dumped with by_alias=True, exclude_none=True.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireEnum(str, Enum):
    """String enum matched case-insensitively when read from the wire."""

    @classmethod
    def _missing_(cls, value: object) -> WireEnum | None:
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value.lower() == lowered or member.name.lower() == lowered:
                    return member
        return None


class ApiModel(BaseModel):
    """Base for all resource shapes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# Enums
# =============================================================================


class DocumentState(WireEnum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    SCHEDULED = "SCHEDULED"
    UNPUBLISHED = "UNPUBLISHED"
    QUARANTINED = "QUARANTINED"


class DocumentAccess(WireEnum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class DocumentConversionStatus(WireEnum):
    DONE = "DONE"
    CONVERTING = "CONVERTING"
    FAILED = "FAILED"


class DocumentType(WireEnum):
    EDITORIAL = "editorial"
    BOOK = "book"
    PROMOTION = "promotion"
    OTHER = "other"


class DocumentFileType(WireEnum):
    UNKNOWN = "UNKNOWN"
    DOC = "DOC"
    ODP = "ODP"
    ODT = "ODT"
    PDF = "PDF"
    PPT = "PPT"
    RTF = "RTF"
    SXI = "SXI"
    SXW = "SXW"
    WPD = "WPD"
    EPUB = "EPUB"
    MOBI = "MOBI"


class AssetType(str, Enum):
    """Publication asset kinds. wire_value is what the assets endpoint expects."""

    TEXT = "text"
    IMAGE = "image"
    COVER = "cover"

    @property
    def wire_value(self) -> str:
        return f"{self.value}1"


class SharePageLayout(WireEnum):
    DOUBLE = "double"
    SINGLE = "single"


class ShareBackgroundImagePosition(WireEnum):
    TOP_LEFT = "topLeft"
    STRETCH = "stretch"


class QrFormat(WireEnum):
    PNG = "PNG"
    SVG = "SVG"


# =============================================================================
# Documents
# =============================================================================


class DocumentChanges(ApiModel):
    access: DocumentAccess = DocumentAccess.PRIVATE
    description: str | None = None
    downloadable: bool = False
    original_publish_date: datetime | None = None
    preview: bool = False
    scheduled_time: datetime | None = None
    show_detected_links: bool = False
    title: str | None = None

    def __str__(self) -> str:
        downloadable = "Downloadable" if self.downloadable else "Not Downloadable"
        preview = "Preview" if self.preview else "Not Preview"
        return f"Changes: [{self.access.value}] {self.title} ({downloadable}, {preview})"


class DocumentImage(ApiModel):
    height: int = 0
    url: str
    width: int = 0


class DocumentCoverImages(ApiModel):
    large: DocumentImage | None = None
    medium: DocumentImage | None = None
    small: DocumentImage | None = None

    def __str__(self) -> str:
        images = sum(1 for image in (self.large, self.medium, self.small) if image is not None)
        return f"{images} image{'s' if images != 1 else ''}"


class DocumentFileInfo(ApiModel):
    conversion_status: DocumentConversionStatus | None = None
    is_copyright_confirmed: bool = False
    name: str | None = None
    page_count: int = 0
    size: int = 0
    type: DocumentFileType = DocumentFileType.UNKNOWN


class Document(ApiModel):
    """A draft or publication."""

    changes: DocumentChanges | None = None
    cover: DocumentCoverImages | None = None
    created: datetime | None = None
    file_info: DocumentFileInfo | None = None
    location: str | None = None
    owner: str | None = None
    slug: str
    state: DocumentState | None = None

    def __str__(self) -> str:
        state = self.state.value if self.state is not None else "UNKNOWN"
        if self.changes is not None and self.changes.title:
            return f"Document: [{state}] {self.changes.title} ({self.slug})"
        return f"Document: [{state}] {self.slug}"


# =============================================================================
# Drafts
# =============================================================================


class DraftInfo(ApiModel):
    """Document metadata sent when creating or updating a draft."""

    file_id: int | None = None
    access: DocumentAccess = DocumentAccess.PRIVATE
    title: str | None = None
    description: str | None = None
    preview: bool = False
    type: DocumentType = DocumentType.OTHER
    show_detected_links: bool = False
    downloadable: bool = False
    original_publish_date: datetime | None = None
    scheduled_time: datetime | None = None


class Draft(ApiModel):
    """Body for POST /drafts and PATCH /drafts/{slug}."""

    confirm_copyright: bool = False
    file_url: str | None = None
    info: DraftInfo = Field(default_factory=DraftInfo)


class PublishRequest(ApiModel):
    desired_name: str | None = None


class PublishResult(ApiModel):
    public_location: str
    location: str


# =============================================================================
# Sharing
# =============================================================================


class DisplaySettings(ApiModel):
    """Display options for full-screen shares."""

    auto_flip: bool = Field(
        default=False,
        serialization_alias="autoflip",
        validation_alias=AliasChoices("autoflip", "auto_flip"),
    )
    background_color: str | None = None
    background_image_position: ShareBackgroundImagePosition = ShareBackgroundImagePosition.TOP_LEFT
    background_image_url: str | None = None
    hide_share: bool = False
    logo_url: str | None = None
    page_layout: SharePageLayout = SharePageLayout.DOUBLE
    show_other_publications: bool = False
    start_page: int = 1


class ShareResult(ApiModel):
    url: str


class EmbedSettings(ApiModel):
    """Embed options. Sent as query parameters, not as a body."""

    responsive: bool = True
    width: str | None = "100%"
    height: str | None = "100%"
    hide_issuu_logo: bool = False
    hide_share_button: bool = False
    show_other_publications: bool = False


class EmbedResult(ApiModel):
    embed: str


class QrDisplaySettings(ApiModel):
    format: QrFormat = QrFormat.PNG
    full_screen_settings: DisplaySettings | None = None


class QrShareResult(ApiModel):
    qr_code_url: str
    pointed_url: str


# =============================================================================
# Assets
# =============================================================================


class AssetSet(ApiModel):
    text: dict[str, list[str]] | None = None
    images: dict[str, list[str]] | None = Field(
        default=None,
        serialization_alias="image",
        validation_alias=AliasChoices("image", "images"),
    )


class ThumbnailSet(ApiModel):
    small: str | None = None
    medium: str | None = None
    large: str | None = None


class AssetResult(ApiModel):
    assets: AssetSet | None = None
    thumbnails: ThumbnailSet | None = None
    page_image: str | None = None
    page_number: int = 0
