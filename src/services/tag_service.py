"""Service layer for tag operations."""
from uuid import UUID

from sqlalchemy import and_, delete, func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from models.bookmark import Bookmark
from models.tag import Tag, bookmark_tags
from schemas.tag import TagCount


async def get_or_create_tags(
    db: AsyncSession,
    user_id: UUID,
    tag_names: list[str],
) -> list[Tag]:
    """
    Get existing tags or create new ones, resolving all names as a set.

    Runs at most three statements regardless of how many names are given:
    one lookup for every requested name, one batch insert for the missing ones,
    and one lookup of the rows just inserted. The insert uses ON CONFLICT DO
    NOTHING so a concurrent request creating the same tag does not fail this one;
    the follow-up lookup picks up whichever row won.

    Names are matched exactly (case-sensitive). Duplicate names collapse to one tag.

    Args:
        db: Database session.
        user_id: User ID to scope tags.
        tag_names: List of tag names to get or create.

    Returns:
        List of Tag objects in first-occurrence order of the requested names.
    """
    names = list(dict.fromkeys(tag_names))
    if not names:
        return []

    result = await db.execute(
        select(Tag).where(
            Tag.user_id == user_id,
            Tag.name.in_(names),
        ),
    )
    tags_by_name = {tag.name: tag for tag in result.scalars()}

    missing = [name for name in names if name not in tags_by_name]
    if missing:
        await db.execute(
            pg_insert(Tag)
            .values([{"id": uuid7(), "user_id": user_id, "name": name} for name in missing])
            .on_conflict_do_nothing(constraint="uq_tags_user_id_name"),
        )
        result = await db.execute(
            select(Tag).where(
                Tag.user_id == user_id,
                Tag.name.in_(missing),
            ),
        )
        tags_by_name.update({tag.name: tag for tag in result.scalars()})

    return [tags_by_name[name] for name in names]


async def add_tags_to_bookmark(
    db: AsyncSession,
    bookmark_id: UUID,
    user_id: UUID,
    tag_names: list[str],
) -> list[Tag]:
    """
    Resolve tag names and associate them with a bookmark in one batch insert.

    Args:
        db: Database session.
        bookmark_id: Bookmark to tag.
        user_id: Owner of the bookmark (tags are scoped to this user).
        tag_names: Tag names to attach.

    Returns:
        The attached Tag objects.
    """
    tags = await get_or_create_tags(db, user_id, tag_names)
    if tags:
        await db.execute(
            insert(bookmark_tags).values(
                [{"bookmark_id": bookmark_id, "tag_id": tag.id} for tag in tags],
            ),
        )
    return tags


async def replace_bookmark_tags(
    db: AsyncSession,
    bookmark_id: UUID,
    user_id: UUID,
    tag_names: list[str],
) -> list[Tag]:
    """
    Replace a bookmark's entire tag set.

    Deletes every existing association, then attaches `tag_names` as in creation.
    An empty list leaves the bookmark untagged. Tags that end up unused are kept.

    Callers run this inside a transaction or savepoint so the bookmark is never
    observed with a partially replaced tag set.
    """
    await db.execute(
        delete(bookmark_tags).where(bookmark_tags.c.bookmark_id == bookmark_id),
    )
    return await add_tags_to_bookmark(db, bookmark_id, user_id, tag_names)


async def get_user_tags_with_counts(
    db: AsyncSession,
    user_id: UUID,
    limit: int | None = None,
) -> list[TagCount]:
    """
    Get all tags for a user with their usage counts.

    The count is the number of non-deleted bookmarks carrying the tag; archived
    bookmarks still count because they remain visible in listings. Tags with no
    remaining bookmarks are included with a count of zero.

    Args:
        db: Database session.
        user_id: User ID to scope tags.
        limit: Optional maximum number of tags to return (for summary views).

    Returns:
        List of TagCount objects sorted by count desc, then name asc.
    """
    # COUNT ignores NULLs, so the outer join yields 0 for tags without live bookmarks
    usage_count = func.count(Bookmark.id)
    query = (
        select(Tag.name, Tag.color, usage_count.label("count"))
        .outerjoin(bookmark_tags, Tag.id == bookmark_tags.c.tag_id)
        .outerjoin(
            Bookmark,
            and_(
                bookmark_tags.c.bookmark_id == Bookmark.id,
                Bookmark.deleted_at.is_(None),
            ),
        )
        .where(Tag.user_id == user_id)
        .group_by(Tag.id, Tag.name, Tag.color)
        .order_by(usage_count.desc(), Tag.name.asc())
    )
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query)
    return [TagCount(name=row.name, color=row.color, count=row.count) for row in result]
