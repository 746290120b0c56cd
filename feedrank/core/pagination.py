"""Pagination — limit validation and the opaque (created_at, id) feed cursor.

Invariants:
    - Every feed limit is in [MIN_FEED_LIMIT, MAX_FEED_LIMIT], else InvalidArgumentError
    - A cursor encodes the last item's (created_at, id); the next page starts strictly after it
    - Ordering key (created_at DESC, id DESC) is total, so pages never overlap or skip

Design Decisions:
    - urlsafe base64 of "iso-timestamp|uuid": opaque to clients, trivially decodable here
    - Malformed cursor is an InvalidArgumentError, not a silent first page
"""

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from feedrank.core.domain_types import PostId, MIN_FEED_LIMIT, MAX_FEED_LIMIT
from feedrank.core.errors import InvalidArgumentError
from feedrank.core.posts import BookmarkedPost, PostRecord


@dataclass(frozen=True)
class FeedCursor:
    created_at: datetime
    post_id: PostId


def validate_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentError("limit must be an integer", field="limit")
    if not MIN_FEED_LIMIT <= limit <= MAX_FEED_LIMIT:
        raise InvalidArgumentError(
            f"limit must be between {MIN_FEED_LIMIT} and {MAX_FEED_LIMIT}, got {limit}",
            field="limit",
        )
    return limit


def encode_cursor(cursor: FeedCursor) -> str:
    raw = f"{cursor.created_at.isoformat()}|{cursor.post_id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(token: str | None) -> FeedCursor | None:
    """Decode an opaque cursor. None/empty means first page."""
    if not token:
        return None
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii")).decode("utf-8")
        stamp, _, post_id = raw.partition("|")
        created_at = datetime.fromisoformat(stamp)
        parsed_id = PostId(UUID(post_id))
    except (ValueError, UnicodeError, binascii.Error) as e:
        raise InvalidArgumentError(f"malformed cursor: {e}", field="cursor")
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return FeedCursor(created_at=created_at, post_id=parsed_id)


def cursor_after(page: list[PostRecord], limit: int) -> str | None:
    """Cursor for the next page, or None when this page was the last."""
    if len(page) < limit or not page:
        return None
    last = page[-1]
    return encode_cursor(FeedCursor(created_at=last.created_at, post_id=last.id))


def bookmark_cursor_after(page: list[BookmarkedPost], limit: int) -> str | None:
    """Like cursor_after, but positioned on bookmark time rather than post time."""
    if len(page) < limit or not page:
        return None
    last = page[-1]
    return encode_cursor(FeedCursor(created_at=last.bookmarked_at, post_id=last.post.id))
