"""SQL Content Store — SQLAlchemy implementation of the read-only ContentStore Protocol.

Invariants:
    - SELECT only: this adapter never adds, flushes or commits
    - Listing queries filter is_deleted = false; point queries return tombstoned rows too
    - Listing order is (created_at DESC, id DESC), matching the opaque feed cursor;
      the bookmark list uses (bookmarks.created_at DESC, post_id DESC) instead
    - Every SQLAlchemy failure becomes ContentStoreUnavailableError carrying the operation name
    - Rows that cannot form a legal post kind are logged and skipped, never returned

Design Decisions:
    - One statement per Protocol method; get_viewer_interactions is a single UNION ALL
      so a batch of flags costs one round trip
    - Timestamps read back without tzinfo (SQLite) are treated as UTC
    - Activated = accounts.is_claimed
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import and_, desc, func, literal, or_, select, union_all
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feedrank.core.domain_types import AccountId, PostId
from feedrank.core.errors import ContentStoreUnavailableError
from feedrank.core.pagination import FeedCursor
from feedrank.core.posts import (
    AuthorSummary, BookmarkedPost, EngagementCounts, LikeEdge, PostRecord,
    ViewerInteractions,
    kind_from_columns,
)
from feedrank.models.account import Account
from feedrank.models.bookmark import Bookmark
from feedrank.models.follow import Follow
from feedrank.models.like import Like
from feedrank.models.post import Post

logger = logging.getLogger(__name__)


def _utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _to_author(account: Account) -> AuthorSummary:
    return AuthorSummary(
        id=AccountId(account.id),
        handle=account.handle,
        display_name=account.display_name,
        avatar_url=account.avatar_url,
        is_activated=account.is_claimed,
    )


def _to_record(row: Post) -> PostRecord | None:
    try:
        kind = kind_from_columns(row.parent_id, row.target_id, row.body)
    except ValueError as e:
        logger.error(
            f"Skipping post {row.id} with illegal shape: {e}",
            extra={"operation": "decode"},
        )
        return None
    return PostRecord(
        id=PostId(row.id),
        author=_to_author(row.author),
        kind=kind,
        created_at=_utc(row.created_at),
        counters=EngagementCounts(
            like_count=row.like_count,
            reply_count=row.reply_count,
            repost_count=row.repost_count,
        ),
        edited_at=_utc(row.edited_at),
        is_edited=row.is_edited,
        tombstoned=row.is_deleted,
    )


def _to_records(rows) -> list[PostRecord]:
    records = (_to_record(r) for r in rows)
    return [r for r in records if r is not None]


def _newest_first(stmt, before: FeedCursor | None):
    if before is not None:
        stmt = stmt.where(or_(
            Post.created_at < before.created_at,
            and_(Post.created_at == before.created_at, Post.id < before.post_id),
        ))
    return stmt.order_by(Post.created_at.desc(), Post.id.desc())


class SqlContentStore:
    """ContentStore backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, operation: str, stmt):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(
                f"Content store {operation} failed: {e}",
                extra={"operation": operation},
            )
            raise ContentStoreUnavailableError("query failed", operation) from e

    async def get_followees(self, viewer_id: AccountId) -> list[AccountId]:
        result = await self._execute(
            "get_followees",
            select(Follow.followee_id)
            .where(Follow.follower_id == viewer_id)
            .order_by(Follow.created_at, Follow.followee_id),
        )
        return [AccountId(i) for i in result.scalars().all()]

    async def get_posts_by_authors(
        self,
        author_ids: list[AccountId],
        since: datetime | None,
        limit: int,
        before: FeedCursor | None = None,
        activated_only: bool = False,
    ) -> list[PostRecord]:
        if not author_ids:
            return []
        stmt = select(Post).where(
            Post.author_id.in_(author_ids), Post.is_deleted.is_(False),
        )
        if activated_only:
            stmt = stmt.join(Account, Account.id == Post.author_id).where(
                Account.is_claimed.is_(True),
            )
        if since is not None:
            stmt = stmt.where(Post.created_at > since)
        result = await self._execute(
            "get_posts_by_authors", _newest_first(stmt, before).limit(limit),
        )
        return _to_records(result.scalars().all())

    async def get_engagement_counts(
        self, post_id: PostId,
    ) -> EngagementCounts | None:
        result = await self._execute(
            "get_engagement_counts",
            select(Post.like_count, Post.reply_count, Post.repost_count)
            .where(Post.id == post_id),
        )
        row = result.first()
        if row is None:
            return None
        return EngagementCounts(
            like_count=row.like_count,
            reply_count=row.reply_count,
            repost_count=row.repost_count,
        )

    async def get_recent_liked_authors(
        self, viewer_id: AccountId, since: datetime, limit: int,
    ) -> list[AccountId]:
        last_liked = func.max(Like.created_at).label("last_liked")
        result = await self._execute(
            "get_recent_liked_authors",
            select(Post.author_id, last_liked)
            .select_from(Like)
            .join(Post, Post.id == Like.post_id)
            .where(Like.account_id == viewer_id, Like.created_at > since)
            .group_by(Post.author_id)
            .order_by(desc("last_liked"), Post.author_id)
            .limit(limit),
        )
        return [AccountId(row.author_id) for row in result.all()]

    async def get_likers_among_followees(
        self, viewer_id: AccountId, since: datetime,
    ) -> list[LikeEdge]:
        followees = select(Follow.followee_id).where(Follow.follower_id == viewer_id)
        result = await self._execute(
            "get_likers_among_followees",
            select(Like)
            .where(Like.account_id.in_(followees), Like.created_at > since)
            .order_by(Like.created_at.desc(), Like.post_id),
        )
        return [
            LikeEdge(
                actor_id=AccountId(like.account_id),
                post_id=PostId(like.post_id),
                created_at=_utc(like.created_at),
            )
            for like in result.scalars().all()
        ]

    async def get_global_recent(
        self, limit: int, before: FeedCursor | None = None,
    ) -> list[PostRecord]:
        stmt = (
            select(Post)
            .join(Account, Account.id == Post.author_id)
            .where(Account.is_claimed.is_(True), Post.is_deleted.is_(False))
        )
        result = await self._execute(
            "get_global_recent", _newest_first(stmt, before).limit(limit),
        )
        return _to_records(result.scalars().all())

    async def get_post_by_id(self, post_id: PostId) -> PostRecord | None:
        result = await self._execute(
            "get_post_by_id", select(Post).where(Post.id == post_id),
        )
        row = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def get_posts_by_ids(
        self, post_ids: list[PostId],
    ) -> dict[PostId, PostRecord]:
        if not post_ids:
            return {}
        result = await self._execute(
            "get_posts_by_ids", select(Post).where(Post.id.in_(post_ids)),
        )
        return {r.id: r for r in _to_records(result.scalars().all())}

    async def get_trending_candidates(self, since: datetime) -> list[PostRecord]:
        result = await self._execute(
            "get_trending_candidates",
            select(Post)
            .join(Account, Account.id == Post.author_id)
            .where(
                Account.is_claimed.is_(True),
                Post.is_deleted.is_(False),
                Post.created_at > since,
                or_(Post.like_count > 0, Post.reply_count > 0, Post.repost_count > 0),
            ),
        )
        return _to_records(result.scalars().all())

    async def get_viewer_interactions(
        self, viewer_id: AccountId, post_ids: list[PostId],
    ) -> ViewerInteractions:
        if not post_ids:
            return ViewerInteractions()
        liked = select(
            literal("liked").label("flag"), Like.post_id.label("post_id"),
        ).where(Like.account_id == viewer_id, Like.post_id.in_(post_ids))
        reposted = select(
            literal("reposted").label("flag"), Post.target_id.label("post_id"),
        ).where(
            Post.author_id == viewer_id,
            Post.target_id.in_(post_ids),
            Post.is_deleted.is_(False),
        )
        bookmarked = select(
            literal("bookmarked").label("flag"), Bookmark.post_id.label("post_id"),
        ).where(Bookmark.account_id == viewer_id, Bookmark.post_id.in_(post_ids))

        result = await self._execute(
            "get_viewer_interactions", union_all(liked, reposted, bookmarked),
        )
        flags: dict[str, set[PostId]] = {"liked": set(), "reposted": set(), "bookmarked": set()}
        for row in result.all():
            flags[row.flag].add(PostId(_as_uuid(row.post_id)))
        return ViewerInteractions(
            liked=frozenset(flags["liked"]),
            reposted=frozenset(flags["reposted"]),
            bookmarked=frozenset(flags["bookmarked"]),
        )

    async def get_replies(
        self, parent_id: PostId, limit: int, before: FeedCursor | None = None,
    ) -> list[PostRecord]:
        stmt = select(Post).where(
            Post.parent_id == parent_id, Post.is_deleted.is_(False),
        )
        result = await self._execute(
            "get_replies", _newest_first(stmt, before).limit(limit),
        )
        return _to_records(result.scalars().all())

    async def get_bookmarked_posts(
        self, viewer_id: AccountId, limit: int, before: FeedCursor | None = None,
    ) -> list[BookmarkedPost]:
        stmt = (
            select(Bookmark.created_at, Post)
            .join(Post, Post.id == Bookmark.post_id)
            .where(Bookmark.account_id == viewer_id, Post.is_deleted.is_(False))
        )
        if before is not None:
            stmt = stmt.where(or_(
                Bookmark.created_at < before.created_at,
                and_(
                    Bookmark.created_at == before.created_at,
                    Bookmark.post_id < before.post_id,
                ),
            ))
        result = await self._execute(
            "get_bookmarked_posts",
            stmt.order_by(Bookmark.created_at.desc(), Bookmark.post_id.desc())
            .limit(limit),
        )
        page = []
        for bookmarked_at, row in result.all():
            record = _to_record(row)
            if record is not None:
                page.append(BookmarkedPost(bookmarked_at=_utc(bookmarked_at), post=record))
        return page
