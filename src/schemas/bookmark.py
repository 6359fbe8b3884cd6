"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator, model_validator

from schemas.validators import (
    validate_description_length,
    validate_tag_names,
    validate_title,
    validate_url_length,
)


class BookmarkCreate(BaseModel):
    """Schema for creating a new bookmark."""

    # HttpUrl normalizes root domains with trailing slash (example.com -> example.com/)
    # but preserves paths as-is (example.com/page stays example.com/page)
    url: HttpUrl
    title: str
    description: str | None = None
    favicon: HttpUrl | None = None
    starred: bool = False
    tags: list[str] = []

    @field_validator("url")
    @classmethod
    def check_url_length(cls, v: HttpUrl) -> HttpUrl:
        """Validate url length."""
        validate_url_length(str(v))
        return v

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        """Validate title."""
        return validate_title(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v: list[str] | None) -> list[str]:
        """Treat a null tag list as empty."""
        if v is None:
            return []
        return v

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: list[str]) -> list[str]:
        """Validate tag names."""
        return validate_tag_names(v)


class BookmarkUpdate(BaseModel):
    """
    Schema for updating an existing bookmark.

    Only fields present in the request body are applied (callers read it with
    ``model_dump(exclude_unset=True)``), so an omitted field is left untouched while
    ``"description": null`` clears the description. Sending ``tags`` (even ``[]``)
    replaces the whole tag set.
    """

    title: str | None = None
    description: str | None = None
    starred: bool | None = None
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str | None) -> str | None:
        """Validate title; null is not allowed since every bookmark has a title."""
        if v is None:
            raise ValueError("Title cannot be null")
        return validate_title(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("starred")
    @classmethod
    def check_starred(cls, v: bool | None) -> bool | None:
        """Reject explicit null for the starred flag."""
        if v is None:
            raise ValueError("Starred cannot be null")
        return v

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: list[str] | None) -> list[str] | None:
        """Validate tag names if provided."""
        if v is None:
            return None
        return validate_tag_names(v)


class BookmarkResponse(BaseModel):
    """
    Schema for bookmark responses.

    Note: Uses model_validator to extract tag names from the tag_objects
    relationship when eagerly loaded.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str
    title: str
    description: str | None
    favicon: str | None
    starred: bool
    tags: list[str]
    created_at: datetime
    updated_at: datetime
    archived_at: datetime | None = None
    deleted_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def extract_tag_names(cls, data: Any) -> Any:
        """
        Extract tag names from tag_objects relationship.

        Only accesses tag_objects if it's already loaded (not lazy) to avoid
        triggering database queries outside async context.
        """
        if hasattr(data, "__dict__") and not isinstance(data, dict):
            data_dict = {}
            for key in [
                "id", "url", "title", "description", "favicon", "starred",
                "created_at", "updated_at", "archived_at", "deleted_at",
            ]:
                if hasattr(data, key):
                    data_dict[key] = getattr(data, key)

            # SQLAlchemy sets the __dict__ entry when the relationship is loaded
            if "tag_objects" in data.__dict__ and data.__dict__["tag_objects"] is not None:
                data_dict["tags"] = [tag.name for tag in data.__dict__["tag_objects"]]
            else:
                data_dict["tags"] = []

            return data_dict
        return data


class BookmarkListResponse(BaseModel):
    """Schema for paginated bookmark list responses."""

    items: list[BookmarkResponse]
    total: int  # Total count of bookmarks matching the filters (before pagination)
    page: int  # Current page (1-indexed)
    page_size: int
    total_pages: int
    has_more: bool  # True if there are more results beyond this page
    visible_pages: list[int]  # Page numbers to render as pagination links


class BatchDeleteRequest(BaseModel):
    """Schema for soft-deleting several bookmarks at once."""

    ids: list[UUID] = Field(..., min_length=1, max_length=500)


class BatchDeleteResponse(BaseModel):
    """Schema for batch delete results (only ids that were actually deleted)."""

    deleted_ids: list[UUID]
    count: int


class MetadataPreviewResponse(BaseModel):
    """Schema for URL metadata preview (before saving bookmark)."""

    url: str  # Original URL requested
    final_url: str  # URL after following redirects
    title: str | None
    description: str | None
    favicon: str | None
    error: str | None = None  # Error message if fetch failed
