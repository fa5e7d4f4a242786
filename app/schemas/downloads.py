"""Request/response schemas for download blueprints."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, StringConstraints, field_validator

from app.schemas.common import ApiModel

Provider = Literal["winget", "chocolatey", "custom"]
InstallType = Literal["single", "multi"]

MAX_IMAGE_LEN = 500_000
CommandStr = Annotated[str, StringConstraints(min_length=1)]

# Fields that may be omitted on update but never set to null
NON_NULLABLE_FIELDS = ("display_name", "provider", "install_type", "is_interactive", "commands")


class DownloadCreate(ApiModel):
    display_name: str = Field(..., min_length=1, max_length=200)
    package_id: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    provider: Provider
    install_type: InstallType = "single"
    card_artwork: str | None = Field(default=None, max_length=MAX_IMAGE_LEN)
    icon: str | None = Field(default=None, max_length=MAX_IMAGE_LEN)
    preview_image: str | None = Field(default=None, max_length=MAX_IMAGE_LEN)
    script_path: str | None = Field(default=None, max_length=500)
    script_content: str | None = Field(default=None, max_length=100_000)
    is_interactive: bool = False
    commands: list[CommandStr] = Field(..., min_length=1)


class DownloadUpdate(ApiModel):
    """
    Partial update: only fields present in the body are applied.

    A present `commands` list replaces the stored set; an empty list clears it.
    """

    display_name: str | None = Field(default=None, min_length=1, max_length=200)
    package_id: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    provider: Provider | None = None
    install_type: InstallType | None = None
    card_artwork: str | None = Field(default=None, max_length=MAX_IMAGE_LEN)
    icon: str | None = Field(default=None, max_length=MAX_IMAGE_LEN)
    preview_image: str | None = Field(default=None, max_length=MAX_IMAGE_LEN)
    script_path: str | None = Field(default=None, max_length=500)
    script_content: str | None = Field(default=None, max_length=100_000)
    is_interactive: bool | None = None
    commands: list[CommandStr] | None = None

    @field_validator(*NON_NULLABLE_FIELDS)
    @classmethod
    def reject_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class DownloadCommandOut(ApiModel):
    id: str
    download_id: str
    command: str
    sort_order: int
    created_at: datetime


class DownloadSummary(ApiModel):
    """List item: everything except script content."""

    id: str
    display_name: str
    package_id: str | None = None
    description: str | None = None
    provider: Provider
    install_type: InstallType
    card_artwork: str | None = None
    icon: str | None = None
    preview_image: str | None = None
    script_path: str | None = None
    is_interactive: bool
    created_by_id: str
    created_at: datetime
    updated_at: datetime
    commands: list[DownloadCommandOut] = Field(default_factory=list)


class DownloadDetail(DownloadSummary):
    script_content: str | None = None


class DownloadsListResponse(ApiModel):
    downloads: list[DownloadSummary]


class DownloadResponse(ApiModel):
    download: DownloadDetail


class RecentDownload(ApiModel):
    id: str
    display_name: str
    provider: Provider
    install_type: InstallType
    icon: str | None = None
    created_at: datetime


class RecentDownloadsResponse(ApiModel):
    downloads: list[RecentDownload]


class DownloadStats(ApiModel):
    total_downloads: int
    single_install: int
    multi_install: int
    active_users: int


class DownloadStatsResponse(ApiModel):
    stats: DownloadStats
