"""
Pydantic schemas for intent-based bookmark actions.

Form-style clients submit one of several actions identified by an ``intent`` field.
Each intent is a typed model; the union is discriminated on ``intent`` so FastAPI
validates the payload before any service code runs. Tags arrive as a single
space-separated string and are split with parse_tags().
"""
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl

from schemas.bookmark import BookmarkCreate, BookmarkUpdate
from schemas.validators import parse_tags


class CreateAction(BaseModel):
    """Create a bookmark from form fields."""

    intent: Literal["create"]
    url: HttpUrl
    title: str
    description: str | None = None
    tags: str | None = None

    def to_create(self) -> BookmarkCreate:
        """Convert to the typed service input (empty description means absent)."""
        return BookmarkCreate(
            url=self.url,
            title=self.title,
            description=self.description or None,
            tags=parse_tags(self.tags),
        )


class UpdateAction(BaseModel):
    """Edit a bookmark from form fields."""

    intent: Literal["update"]
    bookmark_id: UUID
    title: str | None = None
    description: str | None = None
    tags: str | None = None

    def to_update(self) -> BookmarkUpdate:
        """
        Convert to the typed service input.

        An empty description is treated as absent, matching what edit forms send
        when the field is left blank. A submitted tag string, even an empty one,
        replaces the tag set.
        """
        fields: dict = {}
        if self.title is not None:
            fields["title"] = self.title
        if self.description:
            fields["description"] = self.description
        if self.tags is not None:
            fields["tags"] = parse_tags(self.tags)
        return BookmarkUpdate(**fields)


class DeleteAction(BaseModel):
    """Soft-delete a bookmark."""

    intent: Literal["delete"]
    bookmark_id: UUID


class ToggleStarAction(BaseModel):
    """Flip a bookmark's starred flag."""

    intent: Literal["toggleStar"]
    bookmark_id: UUID


class ToggleArchiveAction(BaseModel):
    """Archive or unarchive a bookmark."""

    intent: Literal["toggleArchive"]
    bookmark_id: UUID


BookmarkAction = Annotated[
    CreateAction | UpdateAction | DeleteAction | ToggleStarAction | ToggleArchiveAction,
    Field(discriminator="intent"),
]


class ActionResult(BaseModel):
    """Uniform result shape returned for every intent."""

    success: bool
    message: str | None = None
