"""Timeline Schemas — Pydantic response models for feeds and single posts.

Invariants:
    - Field names are the wire contract; they do not change when core types are refactored
    - referenced is either a one-level PostOut (whose own referenced is always None)
      or an UnavailablePostOut stub with no body
    - from_summary is the only conversion path from core PostSummary

Design Decisions:
    - Discriminated by the `unavailable` flag rather than a type tag: clients only need to
      know whether the quoted content can be shown
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from feedrank.core.posts import PostSummary, UnavailablePost


class AuthorOut(BaseModel):
    id: UUID
    handle: str
    display_name: str | None = None
    avatar_url: str | None = None


class CountersOut(BaseModel):
    like_count: int = 0
    reply_count: int = 0
    repost_count: int = 0


class ViewerFlagsOut(BaseModel):
    is_liked: bool = False
    is_reposted: bool = False
    is_bookmarked: bool = False


class UnavailablePostOut(BaseModel):
    """Stub for a referenced post that was deleted."""
    id: UUID
    unavailable: Literal[True] = True


class PostOut(BaseModel):
    """A post as rendered in any feed."""
    id: UUID
    kind: Literal["original", "reply", "repost", "quote"]
    author: AuthorOut
    body: str
    counters: CountersOut
    created_at: datetime
    is_edited: bool = False
    edited_at: datetime | None = None
    parent_id: UUID | None = None
    referenced_id: UUID | None = None
    viewer: ViewerFlagsOut = ViewerFlagsOut()
    referenced: "PostOut | UnavailablePostOut | None" = None
    unavailable: Literal[False] = False

    @classmethod
    def from_summary(cls, summary: PostSummary) -> "PostOut":
        referenced = None
        if isinstance(summary.referenced, UnavailablePost):
            referenced = UnavailablePostOut(id=summary.referenced.id)
        elif summary.referenced is not None:
            referenced = cls.from_summary(summary.referenced)

        return cls(
            id=summary.id,
            kind=summary.kind.value,
            author=AuthorOut(
                id=summary.author.id,
                handle=summary.author.handle,
                display_name=summary.author.display_name,
                avatar_url=summary.author.avatar_url,
            ),
            body=summary.body,
            counters=CountersOut(
                like_count=summary.counters.like_count,
                reply_count=summary.counters.reply_count,
                repost_count=summary.counters.repost_count,
            ),
            created_at=summary.created_at,
            is_edited=summary.is_edited,
            edited_at=summary.edited_at,
            parent_id=summary.parent_id,
            referenced_id=summary.referenced_id,
            viewer=ViewerFlagsOut(
                is_liked=summary.viewer.is_liked,
                is_reposted=summary.viewer.is_reposted,
                is_bookmarked=summary.viewer.is_bookmarked,
            ),
            referenced=referenced,
        )


class TimelineResponse(BaseModel):
    """One page of a feed."""
    feed: Literal[
        "home", "global", "trending", "personalized", "author", "replies", "bookmarks",
    ]
    posts: list[PostOut] = []
    next_cursor: str | None = None


PostOut.model_rebuild()
