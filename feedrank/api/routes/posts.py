"""Post Routes — single post view, its replies, an author's posts and the viewer's bookmarks."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from feedrank.api.dependencies import (
    get_assembler, get_viewer_id, resolve_limit, with_deadline,
)
from feedrank.api.routes.timeline import to_response
from feedrank.core.domain_types import AccountId, FeedKind, PostId
from feedrank.schemas.timeline import PostOut, TimelineResponse
from feedrank.services.timeline_assembler import TimelineAssembler

router = APIRouter(prefix="/api/v1", tags=["posts"])


@router.get("/posts/{post_id}", response_model=PostOut)
async def get_post(
    post_id: UUID,
    viewer_id: AccountId | None = Depends(get_viewer_id),
    assembler: TimelineAssembler = Depends(get_assembler),
):
    """Single post with live counters; 404 when absent or deleted."""
    summary = await with_deadline(
        assembler.get_post(PostId(post_id), viewer_id), FeedKind.POST,
    )
    return PostOut.from_summary(summary)


@router.get("/accounts/{account_id}/posts", response_model=TimelineResponse)
async def author_posts(
    account_id: UUID,
    limit: int | None = Query(None),
    cursor: str | None = Query(None),
    viewer_id: AccountId | None = Depends(get_viewer_id),
    assembler: TimelineAssembler = Depends(get_assembler),
):
    timeline = await with_deadline(
        assembler.author_posts(
            AccountId(account_id), viewer_id, resolve_limit(limit), cursor,
        ),
        FeedKind.AUTHOR,
    )
    return to_response(FeedKind.AUTHOR, timeline)


@router.get("/posts/{post_id}/replies", response_model=TimelineResponse)
async def post_replies(
    post_id: UUID,
    limit: int | None = Query(None),
    cursor: str | None = Query(None),
    viewer_id: AccountId | None = Depends(get_viewer_id),
    assembler: TimelineAssembler = Depends(get_assembler),
):
    timeline = await with_deadline(
        assembler.replies(PostId(post_id), viewer_id, resolve_limit(limit), cursor),
        FeedKind.REPLIES,
    )
    return to_response(FeedKind.REPLIES, timeline)


@router.get("/bookmarks", response_model=TimelineResponse)
async def bookmarks(
    limit: int | None = Query(None),
    cursor: str | None = Query(None),
    viewer_id: AccountId | None = Depends(get_viewer_id),
    assembler: TimelineAssembler = Depends(get_assembler),
):
    """Viewer's bookmarks; 400 without X-Viewer-Id."""
    timeline = await with_deadline(
        assembler.bookmarks(viewer_id, resolve_limit(limit), cursor),
        FeedKind.BOOKMARKS,
    )
    return to_response(FeedKind.BOOKMARKS, timeline)
