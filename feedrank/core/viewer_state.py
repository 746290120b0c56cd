"""Viewer State — pure decoration of post records with per-viewer flags and nested summaries.

Invariants:
    - No viewer (interactions is None) → every flag is False, outer and nested
    - Repost/Quote posts get exactly one level of nested summary; depth 0 keeps only referenced_id
    - A tombstoned or missing referenced post becomes an UnavailablePost stub (no body)
    - The outer post's counters are never altered by the state of what it references
    - Output order equals input order

Design Decisions:
    - Depth is an explicit parameter capped at MAX_NESTED_DEPTH: the shell fetches exactly
      one level in one batch, so deeper resolution would be answered with wrong stubs
    - Lookups arrive pre-batched (ViewerInteractions, referenced map): this module never does IO
"""

from feedrank.core.domain_types import PostId, MAX_NESTED_DEPTH
from feedrank.core.posts import (
    PostRecord, PostSummary, UnavailablePost, ViewerFlags, ViewerInteractions,
)


def referenced_ids(posts: list[PostRecord]) -> list[PostId]:
    """Unique Repost/Quote target ids, in first-seen order."""
    ids: list[PostId] = []
    seen: set[PostId] = set()
    for post in posts:
        target = post.target_id
        if target is not None and target not in seen:
            seen.add(target)
            ids.append(target)
    return ids


def flag_ids(
    posts: list[PostRecord], referenced: dict[PostId, PostRecord],
) -> list[PostId]:
    """Every id whose viewer flags will be displayed: outer posts plus live nested posts."""
    ids = [p.id for p in posts]
    ids.extend(r.id for r in referenced.values() if not r.tombstoned)
    return list(dict.fromkeys(ids))


def flags_for(
    post_id: PostId, interactions: ViewerInteractions | None,
) -> ViewerFlags:
    if interactions is None:
        return ViewerFlags()
    return ViewerFlags(
        is_liked=post_id in interactions.liked,
        is_reposted=post_id in interactions.reposted,
        is_bookmarked=post_id in interactions.bookmarked,
    )


def summarize(
    post: PostRecord,
    interactions: ViewerInteractions | None,
    referenced: dict[PostId, PostRecord],
    depth: int = MAX_NESTED_DEPTH,
) -> PostSummary:
    nested: PostSummary | UnavailablePost | None = None
    target = post.target_id
    if target is not None and depth > 0:
        ref = referenced.get(target)
        if ref is None or ref.tombstoned:
            nested = UnavailablePost(id=target)
        else:
            nested = summarize(ref, interactions, referenced, depth - 1)

    return PostSummary(
        id=post.id,
        kind=post.kind_name,
        author=post.author,
        body=post.body,
        counters=post.counters,
        created_at=post.created_at,
        is_edited=post.is_edited,
        edited_at=post.edited_at,
        parent_id=post.parent_id,
        referenced_id=target,
        viewer=flags_for(post.id, interactions),
        referenced=nested,
    )


def decorate(
    posts: list[PostRecord],
    interactions: ViewerInteractions | None,
    referenced: dict[PostId, PostRecord],
    depth: int = MAX_NESTED_DEPTH,
) -> list[PostSummary]:
    """Summaries for posts, in order. Pure."""
    if not 0 <= depth <= MAX_NESTED_DEPTH:
        raise ValueError(f"depth must be between 0 and {MAX_NESTED_DEPTH}")
    return [summarize(p, interactions, referenced, depth) for p in posts]


def dedupe(posts: list[PostRecord]) -> list[PostRecord]:
    """Drop repeated ids, first occurrence wins."""
    seen: set[PostId] = set()
    unique: list[PostRecord] = []
    for post in posts:
        if post.id not in seen:
            seen.add(post.id)
            unique.append(post)
    return unique
