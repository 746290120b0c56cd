"""Timeline Routes — home, global, trending and personalized feeds.

Invariants:
    - Every route delegates to TimelineAssembler; no ranking logic here
    - limit is validated by the core (1..100), so out-of-range values map to INVALID_ARGUMENT
    - `now` is read once per request and passed down explicitly
    - Each assembly runs under the configured feed deadline

Design Decisions:
    - home and for-you without X-Viewer-Id are rejected with 400, not served anonymously
    - trending and for-you are not paginated; next_cursor is always null for them
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from feedrank.api.dependencies import (
    get_assembler, get_viewer_id, resolve_limit, with_deadline,
)
from feedrank.core.domain_types import AccountId, FeedKind
from feedrank.core.posts import Timeline
from feedrank.schemas.timeline import PostOut, TimelineResponse
from feedrank.services.timeline_assembler import TimelineAssembler

router = APIRouter(prefix="/api/v1/timeline", tags=["timeline"])


def to_response(feed: FeedKind, timeline: Timeline) -> TimelineResponse:
    return TimelineResponse(
        feed=feed.value,
        posts=[PostOut.from_summary(s) for s in timeline.items],
        next_cursor=timeline.next_cursor,
    )


@router.get("/home", response_model=TimelineResponse)
async def home_timeline(
    limit: int | None = Query(None),
    cursor: str | None = Query(None),
    viewer_id: AccountId | None = Depends(get_viewer_id),
    assembler: TimelineAssembler = Depends(get_assembler),
):
    timeline = await with_deadline(
        assembler.home(viewer_id, resolve_limit(limit), cursor), FeedKind.HOME,
    )
    return to_response(FeedKind.HOME, timeline)


@router.get("/global", response_model=TimelineResponse)
async def global_timeline(
    limit: int | None = Query(None),
    cursor: str | None = Query(None),
    viewer_id: AccountId | None = Depends(get_viewer_id),
    assembler: TimelineAssembler = Depends(get_assembler),
):
    timeline = await with_deadline(
        assembler.global_feed(viewer_id, resolve_limit(limit), cursor),
        FeedKind.GLOBAL,
    )
    return to_response(FeedKind.GLOBAL, timeline)


@router.get("/trending", response_model=TimelineResponse)
async def trending_timeline(
    limit: int | None = Query(None),
    viewer_id: AccountId | None = Depends(get_viewer_id),
    assembler: TimelineAssembler = Depends(get_assembler),
):
    now = datetime.now(timezone.utc)
    timeline = await with_deadline(
        assembler.trending(now, viewer_id, resolve_limit(limit)),
        FeedKind.TRENDING,
    )
    return to_response(FeedKind.TRENDING, timeline)


@router.get("/for-you", response_model=TimelineResponse)
async def personalized_timeline(
    limit: int | None = Query(None),
    viewer_id: AccountId | None = Depends(get_viewer_id),
    assembler: TimelineAssembler = Depends(get_assembler),
):
    now = datetime.now(timezone.utc)
    timeline = await with_deadline(
        assembler.personalized(viewer_id, now, resolve_limit(limit)),
        FeedKind.PERSONALIZED,
    )
    return to_response(FeedKind.PERSONALIZED, timeline)
