"""Bookmark CRUD endpoints."""
import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import HttpUrl, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_settings
from core.config import Settings
from models.user import User
from schemas.action import (
    ActionResult,
    BookmarkAction,
    CreateAction,
    DeleteAction,
    ToggleArchiveAction,
    ToggleStarAction,
    UpdateAction,
)
from schemas.bookmark import (
    BatchDeleteRequest,
    BatchDeleteResponse,
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkUpdate,
    MetadataPreviewResponse,
)
from services import bookmark_service, url_scraper
from services.exceptions import DuplicateError, NotFoundError
from services.utils import visible_pages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Create a new bookmark. Returns 409 if the URL is already bookmarked."""
    try:
        bookmark = await bookmark_service.create_bookmark(db, current_user.id, data)
    except DuplicateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return BookmarkResponse.model_validate(bookmark)


@router.get("/", response_model=BookmarkListResponse)
async def list_bookmarks(
    q: str | None = Query(default=None, description="Search query (matches title, description, url)"),  # noqa: E501
    tags: list[str] = Query(default=[], description="Filter by tags (bookmark must have ALL)"),
    starred: bool = Query(default=False, description="Only starred bookmarks"),
    archived: bool | None = Query(default=None, description="true: archived only, false: active only, omitted: both"),  # noqa: E501
    sort_by: Literal["created_at", "updated_at", "title"] = Query(default="created_at", description="Sort field"),  # noqa: E501
    sort_order: Literal["asc", "desc"] = Query(default="desc", description="Sort order"),
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    page_size: int | None = Query(default=None, ge=1, description="Page size (clamped to the configured maximum)"),  # noqa: E501
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkListResponse:
    """
    List bookmarks for the current user with search, filtering, and sorting.

    - **q**: Text search across title, description, and url (case-insensitive)
    - **tags**: Filter by one or more tags; a bookmark must carry all of them
    - **starred**: Only starred bookmarks
    - **archived**: Restrict to archived or non-archived bookmarks
    - **sort_by**: created_at (default), updated_at, or title
    - **sort_order**: Sort ascending or descending (default: desc)
    """
    effective_page_size = min(page_size or settings.default_page_size, settings.max_page_size)
    # Blank values (e.g. `?tags=`) are not tag names
    tag_filter = [t.strip() for t in tags if t.strip()]
    result = await bookmark_service.search_bookmarks(
        db=db,
        user_id=current_user.id,
        query=q,
        tags=tag_filter or None,
        starred=starred,
        archived=archived,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=effective_page_size,
    )
    return BookmarkListResponse(
        items=[BookmarkResponse.model_validate(b) for b in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        has_more=result.has_more,
        visible_pages=visible_pages(
            result.page, result.total_pages, settings.max_visible_pages,
        ),
    )


@router.get("/metadata", response_model=MetadataPreviewResponse)
async def fetch_metadata(
    url: HttpUrl = Query(..., description="URL to fetch metadata from"),
    current_user: User = Depends(get_current_user),  # noqa: ARG001
) -> MetadataPreviewResponse:
    """
    Fetch title, description and favicon for a URL before saving it.

    Fetch failures are reported in the `error` field rather than as an HTTP error.
    """
    preview = await url_scraper.preview_url(str(url))
    return MetadataPreviewResponse(
        url=str(url),
        final_url=preview.final_url,
        title=preview.metadata.title,
        description=preview.metadata.description,
        favicon=preview.metadata.favicon,
        error=preview.error,
    )


@router.post("/batch-delete", response_model=BatchDeleteResponse)
async def batch_delete_bookmarks(
    data: BatchDeleteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BatchDeleteResponse:
    """Soft delete several bookmarks. Unknown, foreign or already deleted ids are skipped."""
    deleted_ids = await bookmark_service.batch_delete_bookmarks(
        db, current_user.id, data.ids,
    )
    return BatchDeleteResponse(deleted_ids=deleted_ids, count=len(deleted_ids))


@router.post("/actions", response_model=ActionResult)
async def run_action(
    action: BookmarkAction = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    """
    Run a form-style action identified by its `intent`.

    Always answers with `{success, message}`; duplicate URLs and missing bookmarks
    are reported as `success: false` instead of HTTP errors.
    """
    user_id = current_user.id
    try:
        if isinstance(action, CreateAction):
            await bookmark_service.create_bookmark(db, user_id, action.to_create())
            return ActionResult(success=True, message="Bookmark added successfully")

        if isinstance(action, UpdateAction):
            await bookmark_service.update_bookmark(
                db, user_id, action.bookmark_id, action.to_update(),
            )
            return ActionResult(success=True, message="Bookmark updated successfully")

        if isinstance(action, DeleteAction):
            try:
                await bookmark_service.delete_bookmark(db, user_id, action.bookmark_id)
            except NotFoundError:
                # Already deleted (e.g. double submit): nothing left to do
                logger.info("Delete of missing bookmark %s ignored", action.bookmark_id)
            return ActionResult(success=True, message="Bookmark deleted")

        if isinstance(action, ToggleStarAction):
            bookmark = await bookmark_service.toggle_star(db, user_id, action.bookmark_id)
            message = "Bookmark starred" if bookmark.starred else "Bookmark unstarred"
            return ActionResult(success=True, message=message)

        if isinstance(action, ToggleArchiveAction):
            bookmark = await bookmark_service.toggle_archive(db, user_id, action.bookmark_id)
            message = "Bookmark archived" if bookmark.is_archived else "Bookmark unarchived"
            return ActionResult(success=True, message=message)
    except (DuplicateError, NotFoundError) as e:
        return ActionResult(success=False, message=str(e))
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False),
        ) from e

    return ActionResult(success=False, message="Unknown action")


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await bookmark_service.get_bookmark(db, current_user.id, bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: UUID,
    data: BookmarkUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Update a bookmark. Only the fields sent are changed; `tags` replaces the tag set."""
    try:
        bookmark = await bookmark_service.update_bookmark(
            db, current_user.id, bookmark_id, data,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Soft delete a bookmark."""
    try:
        await bookmark_service.delete_bookmark(db, current_user.id, bookmark_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post("/{bookmark_id}/star", response_model=BookmarkResponse)
async def toggle_star(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Toggle a bookmark's starred flag."""
    try:
        bookmark = await bookmark_service.toggle_star(db, current_user.id, bookmark_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return BookmarkResponse.model_validate(bookmark)


@router.post("/{bookmark_id}/archive", response_model=BookmarkResponse)
async def toggle_archive(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Archive an active bookmark, or unarchive an archived one."""
    try:
        bookmark = await bookmark_service.toggle_archive(db, current_user.id, bookmark_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return BookmarkResponse.model_validate(bookmark)
