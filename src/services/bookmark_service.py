"""Service layer for bookmark CRUD operations."""
import logging
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from sqlalchemy import case, exists, func, null, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from models.bookmark import Bookmark
from models.tag import Tag, bookmark_tags
from schemas.bookmark import BookmarkCreate, BookmarkUpdate
from services.exceptions import DuplicateError, NotFoundError
from services.tag_service import add_tags_to_bookmark, replace_bookmark_tags
from services.utils import escape_ilike, page_offset, total_pages

logger = logging.getLogger(__name__)

SortField = Literal["created_at", "updated_at", "title"]
SortOrder = Literal["asc", "desc"]

ACTIVE_URL_INDEX = "uq_bookmarks_user_url_active"


@dataclass
class BookmarkPage:
    """One page of search results plus the total across all pages."""

    items: list[Bookmark]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Number of pages for the full result set."""
        return total_pages(self.total, self.page_size)

    @property
    def has_more(self) -> bool:
        """True if there are more results beyond this page."""
        return page_offset(self.page, self.page_size) + len(self.items) < self.total


async def _check_url_exists(
    db: AsyncSession,
    user_id: UUID,
    url: str,
) -> Bookmark | None:
    """
    Check if a URL exists for this user (excluding soft-deleted bookmarks).

    Returns the existing bookmark if found, None otherwise.
    """
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.user_id == user_id,
            Bookmark.url == url,
            Bookmark.deleted_at.is_(None),  # Only non-deleted
        ),
    )
    return result.scalar_one_or_none()


async def _get_or_raise(db: AsyncSession, user_id: UUID, bookmark_id: UUID) -> Bookmark:
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        raise NotFoundError(bookmark_id)
    return bookmark


async def create_bookmark(
    db: AsyncSession,
    user_id: UUID,
    data: BookmarkCreate,
) -> Bookmark:
    """
    Create a new bookmark for a user.

    Args:
        db: Database session.
        user_id: User ID to create the bookmark for.
        data: Bookmark creation data.

    Returns:
        The created bookmark with its tags loaded.

    Raises:
        DuplicateError: If a non-deleted bookmark with the same URL exists.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
        Tag names that the user has never used before are created as a side effect.
    """
    url_str = str(data.url)

    # Early check for a friendlier error; the partial unique index is the real guarantee
    if await _check_url_exists(db, user_id, url_str) is not None:
        raise DuplicateError(url_str)

    bookmark = Bookmark(
        user_id=user_id,
        url=url_str,
        title=data.title,
        description=data.description,
        favicon=str(data.favicon) if data.favicon is not None else None,
        starred=data.starred,
    )
    try:
        async with db.begin_nested():
            db.add(bookmark)
            await db.flush()
    except IntegrityError as e:
        # Fallback for race condition: a concurrent request inserted the same URL
        if ACTIVE_URL_INDEX in str(e):
            raise DuplicateError(url_str) from e
        raise

    if data.tags:
        await add_tags_to_bookmark(db, bookmark.id, user_id, data.tags)

    logger.info("Created bookmark %s for user %s", bookmark.id, user_id)
    return await _get_or_raise(db, user_id, bookmark.id)


async def get_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
    include_deleted: bool = False,
) -> Bookmark | None:
    """
    Get a bookmark by ID, scoped to user.

    Always re-reads the row (populate_existing) so values written by UPDATE
    statements earlier in the same session are reflected.

    Args:
        db: Database session.
        user_id: User ID to scope the bookmark.
        bookmark_id: ID of the bookmark to retrieve.
        include_deleted: If True, include soft-deleted bookmarks. Default False.

    Returns:
        The bookmark with tags loaded, or None if not found.
    """
    query = (
        select(Bookmark)
        .options(selectinload(Bookmark.tag_objects))
        .where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
        )
        .execution_options(populate_existing=True)
    )

    if not include_deleted:
        query = query.where(Bookmark.deleted_at.is_(None))

    result = await db.execute(query)
    return result.scalar_one_or_none()


def _apply_tag_filter(
    query: Select[tuple[Bookmark]],
    user_id: UUID,
    tags: list[str],
) -> Select[tuple[Bookmark]]:
    """Require the bookmark to carry ALL of `tags` (one EXISTS per tag)."""
    for tag_name in dict.fromkeys(tags):
        subq = (
            select(bookmark_tags.c.bookmark_id)
            .join(Tag, bookmark_tags.c.tag_id == Tag.id)
            .where(
                bookmark_tags.c.bookmark_id == Bookmark.id,
                Tag.name == tag_name,
                Tag.user_id == user_id,
            )
        )
        query = query.where(exists(subq))
    return query


def _apply_sorting(
    query: Select[tuple[Bookmark]],
    sort_by: SortField,
    sort_order: SortOrder,
) -> Select[tuple[Bookmark]]:
    """Apply sorting with tiebreakers (created_at, then id) for deterministic pages."""
    sort_columns = {
        "created_at": Bookmark.created_at,
        "updated_at": Bookmark.updated_at,
        "title": Bookmark.title,
    }
    sort_column = sort_columns[sort_by]

    if sort_order == "desc":
        return query.order_by(
            sort_column.desc(),
            Bookmark.created_at.desc(),
            Bookmark.id.desc(),
        )
    return query.order_by(
        sort_column.asc(),
        Bookmark.created_at.asc(),
        Bookmark.id.asc(),
    )


async def search_bookmarks(
    db: AsyncSession,
    user_id: UUID,
    query: str | None = None,
    tags: list[str] | None = None,
    starred: bool = False,
    archived: bool | None = None,
    sort_by: SortField = "created_at",
    sort_order: SortOrder = "desc",
    page: int = 1,
    page_size: int = 50,
) -> BookmarkPage:
    """
    Search and filter bookmarks for a user with pagination.

    All filters are AND-combined. Soft-deleted bookmarks are never returned.

    Args:
        db: Database session.
        user_id: User ID to scope bookmarks.
        query: Case-insensitive substring match against title, description, or url.
        tags: Bookmark must carry ALL of these tags (exact name match).
        starred: If True, only starred bookmarks.
        archived: True for archived only, False for non-archived only, None for both.
        sort_by: Field to sort by.
        sort_order: Sort direction.
        page: 1-indexed page number.
        page_size: Number of bookmarks per page.

    Returns:
        BookmarkPage with the bookmarks on the page and the total matching count.
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    # Base query scoped to user with eager loading of tags
    base_query = (
        select(Bookmark)
        .options(selectinload(Bookmark.tag_objects))
        .where(
            Bookmark.user_id == user_id,
            Bookmark.deleted_at.is_(None),
        )
    )

    if archived is True:
        base_query = base_query.where(Bookmark.archived_at.is_not(None))
    elif archived is False:
        base_query = base_query.where(Bookmark.archived_at.is_(None))

    if starred:
        base_query = base_query.where(Bookmark.starred.is_(True))

    if query:
        search_pattern = f"%{escape_ilike(query)}%"
        base_query = base_query.where(
            or_(
                Bookmark.title.ilike(search_pattern),
                Bookmark.description.ilike(search_pattern),
                Bookmark.url.ilike(search_pattern),
            ),
        )

    if tags:
        base_query = _apply_tag_filter(base_query, user_id, tags)

    # Count over the same filtered select so the tag intersection is honoured
    count_query = select(func.count()).select_from(base_query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    base_query = _apply_sorting(base_query, sort_by, sort_order)
    base_query = base_query.offset(page_offset(page, page_size)).limit(page_size)

    result = await db.execute(base_query)
    bookmarks = list(result.scalars().all())

    return BookmarkPage(items=bookmarks, total=total, page=page, page_size=page_size)


async def update_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
    data: BookmarkUpdate,
) -> Bookmark:
    """
    Partially update a bookmark.

    Only fields set on `data` are applied. If `tags` is set (even to an empty
    list) the whole tag set is replaced. Field changes and tag replacement share
    one savepoint, so a failure leaves both untouched.

    Raises:
        NotFoundError: If no non-deleted bookmark with this id belongs to the user.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await _get_or_raise(db, user_id, bookmark_id)

    update_data = data.model_dump(exclude_unset=True)
    new_tags = update_data.pop("tags", None)

    async with db.begin_nested():
        for field, value in update_data.items():
            setattr(bookmark, field, value)
        # Explicitly set updated_at since TimestampMixin has no onupdate
        bookmark.updated_at = func.clock_timestamp()
        await db.flush()

        if new_tags is not None:
            await replace_bookmark_tags(db, bookmark.id, user_id, new_tags)

    return await _get_or_raise(db, user_id, bookmark_id)


async def toggle_star(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> Bookmark:
    """
    Flip a bookmark's starred flag.

    A single UPDATE ... SET starred = NOT starred, so concurrent toggles from
    several tabs or devices never lose an update.

    Raises:
        NotFoundError: If no non-deleted bookmark with this id belongs to the user.
    """
    result = await db.execute(
        update(Bookmark)
        .where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
            Bookmark.deleted_at.is_(None),
        )
        .values(starred=~Bookmark.starred, updated_at=func.clock_timestamp())
        .returning(Bookmark.id)
        .execution_options(synchronize_session=False),
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError(bookmark_id)
    return await _get_or_raise(db, user_id, bookmark_id)


async def toggle_archive(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> Bookmark:
    """
    Archive a bookmark if it is active, unarchive it if it is archived.

    The flip happens database-side in one statement (CASE on archived_at),
    so it is race-free in the same way as toggle_star.

    Raises:
        NotFoundError: If no non-deleted bookmark with this id belongs to the user.
    """
    result = await db.execute(
        update(Bookmark)
        .where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
            Bookmark.deleted_at.is_(None),
        )
        .values(
            archived_at=case(
                (Bookmark.archived_at.is_(None), func.clock_timestamp()),
                else_=null(),
            ),
            updated_at=func.clock_timestamp(),
        )
        .returning(Bookmark.id)
        .execution_options(synchronize_session=False),
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError(bookmark_id)
    return await _get_or_raise(db, user_id, bookmark_id)


async def delete_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> None:
    """
    Soft delete a bookmark by setting deleted_at.

    The row is kept, and its URL becomes available for a new bookmark. Calling
    this again for the same id raises NotFoundError, which callers treat as
    "already gone".

    Raises:
        NotFoundError: If no non-deleted bookmark with this id belongs to the user.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    result = await db.execute(
        update(Bookmark)
        .where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
            Bookmark.deleted_at.is_(None),
        )
        .values(deleted_at=func.clock_timestamp(), updated_at=func.clock_timestamp())
        .returning(Bookmark.id)
        .execution_options(synchronize_session=False),
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError(bookmark_id)
    logger.info("Soft-deleted bookmark %s for user %s", bookmark_id, user_id)


async def batch_delete_bookmarks(
    db: AsyncSession,
    user_id: UUID,
    bookmark_ids: list[UUID],
) -> list[UUID]:
    """
    Soft delete several bookmarks in one statement.

    Ids that belong to another user, do not exist, or are already deleted are
    skipped silently.

    Returns:
        The ids that were actually soft-deleted.
    """
    if not bookmark_ids:
        return []

    result = await db.execute(
        update(Bookmark)
        .where(
            Bookmark.id.in_(bookmark_ids),
            Bookmark.user_id == user_id,
            Bookmark.deleted_at.is_(None),
        )
        .values(deleted_at=func.clock_timestamp(), updated_at=func.clock_timestamp())
        .returning(Bookmark.id)
        .execution_options(synchronize_session=False),
    )
    deleted_ids = list(result.scalars().all())
    logger.info(
        "Batch soft-deleted %d of %d bookmarks for user %s",
        len(deleted_ids),
        len(bookmark_ids),
        user_id,
    )
    return deleted_ids
