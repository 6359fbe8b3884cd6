"""Bookmark model for storing user bookmarks."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    false,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.tag import bookmark_tags

if TYPE_CHECKING:
    from models.tag import Tag
    from models.user import User


class Bookmark(Base, UUIDv7Mixin, TimestampMixin):
    """Bookmark model - stores URLs with metadata and tags."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        # Partial unique index: enforces uniqueness only for non-deleted bookmarks
        # This allows soft-deleted bookmarks to not count toward URL uniqueness
        Index(
            "uq_bookmarks_user_url_active",
            "user_id",
            "url",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index("ix_bookmarks_deleted_at_created_at", "deleted_at", "created_at"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    favicon: Mapped[str | None] = mapped_column(Text, nullable=True)
    starred: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # Soft delete and archive timestamps
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None, index=True,
    )
    archived_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None, index=True,
    )

    user: Mapped["User"] = relationship(back_populates="bookmarks")
    # Association rows are written in bulk by tag_service, never through this collection
    tag_objects: Mapped[list["Tag"]] = relationship(
        secondary=bookmark_tags,
        order_by="Tag.name",
        viewonly=True,
    )

    @property
    def tag_names(self) -> list[str]:
        """Names of the loaded tags, sorted."""
        return [tag.name for tag in self.tag_objects]

    @property
    def is_archived(self) -> bool:
        """Check if bookmark is currently archived."""
        return self.archived_at is not None
