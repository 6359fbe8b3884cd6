"""Shared exceptions for service layer operations."""
from uuid import UUID


class DuplicateError(Exception):
    """Raised when a non-deleted bookmark with the same URL already exists for the user."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"A bookmark with URL '{url}' already exists")


class NotFoundError(Exception):
    """
    Raised when a mutation targets a bookmark that does not exist.

    Covers ids owned by another user and soft-deleted bookmarks as well, so callers
    cannot distinguish "not yours" from "not there".
    """

    def __init__(self, bookmark_id: UUID) -> None:
        self.bookmark_id = bookmark_id
        super().__init__("Bookmark not found")
