"""Tag listing endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_settings
from core.config import Settings
from models.user import User
from schemas.tag import TagListResponse
from services.tag_service import get_user_tags_with_counts

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=TagListResponse)
async def list_tags(
    limit: int | None = Query(default=None, ge=1, description="Return at most this many tags"),
    sidebar: bool = Query(default=False, description="Limit to MAX_SIDEBAR_TAGS most used tags"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> TagListResponse:
    """
    Get all tags for the current user with their usage counts.

    `count` is the number of non-deleted bookmarks carrying the tag. Tags that no
    longer label any bookmark are returned with a count of zero.

    Results are sorted by count DESC, then name ASC. Pass `limit` (or
    `sidebar=true`) to get only the most used tags.
    """
    if sidebar:
        limit = min(limit, settings.max_sidebar_tags) if limit else settings.max_sidebar_tags
    tags = await get_user_tags_with_counts(db, current_user.id, limit=limit)
    return TagListResponse(tags=tags)
