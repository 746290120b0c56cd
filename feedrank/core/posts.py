"""Post Types — tagged post-kind variant, stored post records, and feed summaries.

Invariants:
    - A post's kind is exactly one of Original, Reply, Repost, Quote
    - Repost carries no body field at all; Original, Reply and Quote require a non-blank body
    - A row that is both a reply and a repost/quote cannot be constructed
    - PostRecord is what the Content Store returns; PostSummary is what feeds return
    - Nested summaries never carry a nested summary of their own

Design Decisions:
    - Frozen dataclasses: records are shared between the trending cache and many viewers
    - kind_from_columns is the single place nullable storage columns become a variant
    - UnavailablePost stub instead of None: the outer post keeps a visible, consistent reference
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from feedrank.core.domain_types import (
    AccountId, PostId, PostKindName,
    LIKE_WEIGHT, REPLY_WEIGHT, REPOST_WEIGHT,
)


# ─── Kind variant ────────────────────────────────────────────────

def _require_body(body: str, kind: str) -> None:
    if not body or not body.strip():
        raise ValueError(f"{kind} post requires a non-empty body")


@dataclass(frozen=True)
class Original:
    body: str

    def __post_init__(self):
        _require_body(self.body, "original")


@dataclass(frozen=True)
class Reply:
    parent_id: PostId
    body: str

    def __post_init__(self):
        _require_body(self.body, "reply")


@dataclass(frozen=True)
class Repost:
    target_id: PostId


@dataclass(frozen=True)
class Quote:
    target_id: PostId
    body: str

    def __post_init__(self):
        _require_body(self.body, "quote")


PostKind = Union[Original, Reply, Repost, Quote]

_KIND_NAMES: dict[type, PostKindName] = {
    Original: PostKindName.ORIGINAL,
    Reply: PostKindName.REPLY,
    Repost: PostKindName.REPOST,
    Quote: PostKindName.QUOTE,
}


def kind_from_columns(
    parent_id: PostId | None, target_id: PostId | None, body: str | None,
) -> PostKind:
    """Build the kind variant from nullable storage columns. Raises ValueError on illegal rows."""
    body = body or ""
    if parent_id is not None and target_id is not None:
        raise ValueError("post cannot be both a reply and a repost")
    if target_id is not None:
        return Quote(target_id, body) if body.strip() else Repost(target_id)
    if parent_id is not None:
        return Reply(parent_id, body)
    return Original(body)


# ─── Stored records ──────────────────────────────────────────────

@dataclass(frozen=True)
class EngagementCounts:
    like_count: int = 0
    reply_count: int = 0
    repost_count: int = 0

    @property
    def weighted(self) -> int:
        """Engagement numerator of the trending score."""
        return (
            self.like_count * LIKE_WEIGHT
            + self.reply_count * REPLY_WEIGHT
            + self.repost_count * REPOST_WEIGHT
        )

    @property
    def total(self) -> int:
        return self.like_count + self.reply_count + self.repost_count


@dataclass(frozen=True)
class AuthorSummary:
    id: AccountId
    handle: str
    display_name: str | None = None
    avatar_url: str | None = None
    is_activated: bool = False


@dataclass(frozen=True)
class PostRecord:
    """A post as read from the Content Store (tombstoned rows included)."""
    id: PostId
    author: AuthorSummary
    kind: PostKind
    created_at: datetime
    counters: EngagementCounts = EngagementCounts()
    edited_at: datetime | None = None
    is_edited: bool = False
    tombstoned: bool = False

    @property
    def author_id(self) -> AccountId:
        return self.author.id

    @property
    def body(self) -> str:
        return getattr(self.kind, "body", "")

    @property
    def parent_id(self) -> PostId | None:
        return self.kind.parent_id if isinstance(self.kind, Reply) else None

    @property
    def target_id(self) -> PostId | None:
        if isinstance(self.kind, (Repost, Quote)):
            return self.kind.target_id
        return None

    @property
    def kind_name(self) -> PostKindName:
        return _KIND_NAMES[type(self.kind)]


@dataclass(frozen=True)
class BookmarkedPost:
    """A post on the viewer's bookmark list; ordered by when it was bookmarked."""
    bookmarked_at: datetime
    post: PostRecord


@dataclass(frozen=True)
class LikeEdge:
    actor_id: AccountId
    post_id: PostId
    created_at: datetime


@dataclass(frozen=True)
class ViewerInteractions:
    """Post ids (within one batch) the viewer has liked, reposted, bookmarked."""
    liked: frozenset[PostId] = frozenset()
    reposted: frozenset[PostId] = frozenset()
    bookmarked: frozenset[PostId] = frozenset()


# ─── Feed output ─────────────────────────────────────────────────

@dataclass(frozen=True)
class ViewerFlags:
    is_liked: bool = False
    is_reposted: bool = False
    is_bookmarked: bool = False


@dataclass(frozen=True)
class UnavailablePost:
    """Stub for a referenced post that is tombstoned or missing."""
    id: PostId
    unavailable: bool = True


@dataclass(frozen=True)
class PostSummary:
    id: PostId
    kind: PostKindName
    author: AuthorSummary
    body: str
    counters: EngagementCounts
    created_at: datetime
    is_edited: bool
    edited_at: datetime | None = None
    parent_id: PostId | None = None
    referenced_id: PostId | None = None
    viewer: ViewerFlags = field(default_factory=ViewerFlags)
    referenced: Union["PostSummary", UnavailablePost, None] = None


@dataclass(frozen=True)
class Timeline:
    """One page of a feed."""
    items: list[PostSummary]
    next_cursor: str | None = None
