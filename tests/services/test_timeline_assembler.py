"""Timeline Assembler — the public read operations end to end over the in-memory store.

Invariants:
    - limit outside 1..100 → InvalidArgumentError on every operation
    - home, personalized and bookmarks require a viewer
    - Pages never overlap and never contain a repeated id
    - Deleted quoted posts render as unavailable stubs; the quoting post is unchanged
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from feedrank.core.domain_types import AccountId, PostId
from feedrank.core.errors import (
    ContentStoreUnavailableError, InvalidArgumentError, NotFoundError,
)
from feedrank.core.posts import EngagementCounts, UnavailablePost
from tests.builders import NOW, make_author, make_post

VIEWER = make_author("viewer")


def _operations(assembler):
    return {
        "home": lambda limit: assembler.home(VIEWER.id, limit),
        "global": lambda limit: assembler.global_feed(VIEWER.id, limit),
        "trending": lambda limit: assembler.trending(NOW, VIEWER.id, limit),
        "personalized": lambda limit: assembler.personalized(VIEWER.id, NOW, limit),
        "author": lambda limit: assembler.author_posts(VIEWER.id, VIEWER.id, limit),
        "replies": lambda limit: assembler.replies(PostId(uuid4()), VIEWER.id, limit),
        "bookmarks": lambda limit: assembler.bookmarks(VIEWER.id, limit),
    }


@pytest.mark.parametrize(
    "feed", ["home", "global", "trending", "personalized", "author", "replies", "bookmarks"],
)
@pytest.mark.parametrize("limit", [0, 101])
async def test_out_of_range_limit_rejected_everywhere(assembler, store, feed, limit):
    with pytest.raises(InvalidArgumentError):
        await _operations(assembler)[feed](limit)
    assert sum(store.calls.values()) == 0


# ─── Home ────────────────────────────────────────────────────────

async def test_home_of_viewer_following_nobody_is_own_posts(assembler, store):
    mine = [make_post(author=VIEWER, hours_ago=h) for h in (3, 1, 2)]
    store.add(*mine, make_post(hours_ago=0.5))

    timeline = await assembler.home(VIEWER.id, 10)

    assert [s.id for s in timeline.items] == [mine[1].id, mine[2].id, mine[0].id]
    assert timeline.next_cursor is None


async def test_home_includes_followees_and_hides_tombstones(assembler, store):
    friend = make_author("friend")
    store.follow(VIEWER.id, friend.id)
    kept = make_post(author=friend, hours_ago=1)
    deleted = make_post(author=friend, hours_ago=2, tombstoned=True)
    store.add(kept, deleted, make_post(hours_ago=1))

    timeline = await assembler.home(VIEWER.id, 10)

    assert [s.id for s in timeline.items] == [kept.id]


async def test_home_requires_viewer(assembler):
    with pytest.raises(InvalidArgumentError) as exc_info:
        await assembler.home(None, 10)
    assert exc_info.value.field == "viewer_id"


async def test_home_pages_do_not_overlap(assembler, store):
    store.add(*[make_post(author=VIEWER, hours_ago=h) for h in range(1, 6)])

    seen, cursor, pages = [], None, 0
    while True:
        timeline = await assembler.home(VIEWER.id, 2, cursor)
        seen.extend(s.id for s in timeline.items)
        pages += 1
        cursor = timeline.next_cursor
        if cursor is None:
            break

    assert pages == 3
    assert len(seen) == len(set(seen)) == 5


async def test_malformed_cursor_rejected(assembler):
    with pytest.raises(InvalidArgumentError):
        await assembler.home(VIEWER.id, 10, "%%%")


# ─── Global / author ─────────────────────────────────────────────

async def test_global_excludes_unactivated_authors(assembler, store):
    visible = make_post()
    hidden = make_post(author=make_author(activated=False))
    store.add(visible, hidden)

    timeline = await assembler.global_feed(None, 10)

    assert [s.id for s in timeline.items] == [visible.id]


async def test_author_posts_lists_one_author(assembler, store):
    author = make_author("writer")
    theirs = make_post(author=author)
    store.add(theirs, make_post())
    timeline = await assembler.author_posts(author.id, None, 10)
    assert [s.id for s in timeline.items] == [theirs.id]


# ─── Trending ────────────────────────────────────────────────────

async def test_trending_is_stable_within_cache_ttl(assembler, store):
    store.add(*[make_post(hours_ago=h, likes=l) for h, l in [(1, 2), (20, 16), (5, 5)]])

    first = await assembler.trending(NOW, None, 10)
    second = await assembler.trending(NOW, None, 10)

    assert [s.id for s in first.items] == [s.id for s in second.items]
    assert store.calls["get_trending_candidates"] == 1
    assert first.next_cursor is None


async def test_trending_flags_are_per_viewer(assembler, store):
    post = make_post(likes=3)
    store.add(post)
    store.like(VIEWER.id, post.id, NOW)

    mine = await assembler.trending(NOW, VIEWER.id, 10)
    anonymous = await assembler.trending(NOW, None, 10)

    assert mine.items[0].viewer.is_liked
    assert not anonymous.items[0].viewer.is_liked


# ─── Personalized ────────────────────────────────────────────────

async def test_personalized_requires_viewer(assembler, store):
    with pytest.raises(InvalidArgumentError):
        await assembler.personalized(None, NOW, 10)
    assert sum(store.calls.values()) == 0


async def test_personalized_for_cold_viewer(assembler, store):
    hot = make_post(likes=6, hours_ago=2)
    store.add(hot, *[make_post(hours_ago=3 + i) for i in range(4)])

    timeline = await assembler.personalized(VIEWER.id, NOW, 10)

    ids = [s.id for s in timeline.items]
    assert ids[0] == hot.id
    assert len(ids) == len(set(ids)) == 5


# ─── Replies ─────────────────────────────────────────────────────

async def test_replies_list_direct_replies_newest_first(assembler, store):
    parent = make_post(hours_ago=6)
    older = make_post(parent_id=parent.id, hours_ago=4)
    newer = make_post(parent_id=parent.id, hours_ago=2)
    gone = make_post(parent_id=parent.id, hours_ago=1, tombstoned=True)
    nested = make_post(parent_id=older.id, hours_ago=1)
    store.add(parent, older, newer, gone, nested, make_post())

    timeline = await assembler.replies(parent.id, VIEWER.id, 10)

    assert [s.id for s in timeline.items] == [newer.id, older.id]
    assert timeline.next_cursor is None


async def test_replies_to_deleted_parent_still_listed(assembler, store):
    parent = make_post(tombstoned=True, hours_ago=5)
    reply = make_post(parent_id=parent.id, hours_ago=1)
    store.add(parent, reply)

    timeline = await assembler.replies(parent.id, None, 10)

    assert [s.id for s in timeline.items] == [reply.id]


async def test_replies_to_unknown_post_is_not_found(assembler, store):
    with pytest.raises(NotFoundError):
        await assembler.replies(PostId(uuid4()), None, 10)
    assert store.calls["get_replies"] == 0


# ─── Bookmarks ───────────────────────────────────────────────────

async def test_bookmarks_require_viewer(assembler, store):
    with pytest.raises(InvalidArgumentError) as exc_info:
        await assembler.bookmarks(None, 10)
    assert exc_info.value.field == "viewer_id"
    assert sum(store.calls.values()) == 0


async def test_bookmarks_ordered_by_bookmark_time(assembler, store):
    old_post = make_post(hours_ago=20)
    new_post = make_post(hours_ago=1)
    deleted = make_post(hours_ago=2, tombstoned=True)
    store.add(old_post, new_post, deleted)
    store.bookmark(VIEWER.id, new_post.id, NOW - timedelta(hours=3))
    store.bookmark(VIEWER.id, old_post.id, NOW - timedelta(minutes=5))
    store.bookmark(VIEWER.id, deleted.id, NOW)
    store.bookmark(make_author().id, new_post.id, NOW)

    timeline = await assembler.bookmarks(VIEWER.id, 10)

    assert [s.id for s in timeline.items] == [old_post.id, new_post.id]
    assert all(s.viewer.is_bookmarked for s in timeline.items)


async def test_bookmark_pages_follow_bookmark_time(assembler, store):
    posts = [make_post(hours_ago=h) for h in range(1, 6)]
    store.add(*posts)
    # oldest post bookmarked last
    for i, post in enumerate(reversed(posts)):
        store.bookmark(VIEWER.id, post.id, NOW - timedelta(minutes=i))

    seen, cursor = [], None
    while True:
        timeline = await assembler.bookmarks(VIEWER.id, 2, cursor)
        seen.extend(s.id for s in timeline.items)
        cursor = timeline.next_cursor
        if cursor is None:
            break

    assert seen == [p.id for p in reversed(posts)]


# ─── Single post ─────────────────────────────────────────────────

async def test_quote_of_deleted_post_keeps_its_own_counters(assembler, store):
    quoted = make_post(likes=10)
    quote = make_post(target_id=quoted.id, body="ratio", likes=4, replies=1)
    store.add(quoted, quote)
    store.add(make_post(post_id=quoted.id, likes=10, tombstoned=True))

    summary = await assembler.get_post(quote.id, VIEWER.id)

    assert summary.counters == EngagementCounts(4, 1, 0)
    assert summary.body == "ratio"
    assert summary.referenced == UnavailablePost(id=quoted.id)


async def test_get_post_refreshes_counters(assembler, store):
    post = make_post(likes=1)
    store.add(post)
    store.live_counts[post.id] = EngagementCounts(like_count=7)

    summary = await assembler.get_post(post.id)

    assert summary.counters.like_count == 7


async def test_get_post_missing_or_deleted_is_not_found(assembler, store):
    deleted = make_post(tombstoned=True)
    store.add(deleted)
    with pytest.raises(NotFoundError):
        await assembler.get_post(deleted.id)
    with pytest.raises(NotFoundError):
        await assembler.get_post(PostId(uuid4()))


# ─── Failure ─────────────────────────────────────────────────────

async def test_store_failure_fails_whole_request(assembler, store):
    store.add(make_post(target_id=PostId(uuid4()), body=""))
    store.failing.add("get_posts_by_ids")
    with pytest.raises(ContentStoreUnavailableError):
        await assembler.global_feed(AccountId(uuid4()), 10)
