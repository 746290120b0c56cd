"""SQL Content Store — query semantics against an in-memory SQLite database.

Invariants:
    - Listings hide deleted rows and unclaimed authors where required
    - Point reads return deleted rows so references can render as stubs
    - Viewer interactions come back from one statement
    - activated_only filters authors before the row limit applies
    - Bookmarks list by bookmark time, not post time
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from feedrank.core.domain_types import AccountId, PostId
from feedrank.core.errors import ContentStoreUnavailableError
from feedrank.core.pagination import bookmark_cursor_after, decode_cursor, cursor_after
from feedrank.core.posts import Quote, Repost
from feedrank.infrastructure.content_store import SqlContentStore
from feedrank.models import Account, Bookmark, Follow, Like, Post
from tests.builders import NOW


def _account(db, handle, claimed=True):
    account = Account(id=uuid4(), handle=handle, is_claimed=claimed)
    db.add(account)
    return account


def _post(db, author, hours_ago=1.0, **columns):
    columns.setdefault("body", "hello")
    post = Post(
        id=uuid4(), author_id=author.id,
        created_at=NOW - timedelta(hours=hours_ago), **columns,
    )
    db.add(post)
    return post


@pytest.fixture
async def seeded(test_db):
    alice = _account(test_db, "alice")
    bob = _account(test_db, "bob")
    lurker = _account(test_db, "lurker", claimed=False)
    await test_db.flush()

    posts = {
        "a1": _post(test_db, alice, 1, like_count=3),
        "a2": _post(test_db, alice, 2),
        "a_deleted": _post(test_db, alice, 0.5, is_deleted=True, like_count=9),
        "b1": _post(test_db, bob, 3, reply_count=1),
        "g1": _post(test_db, lurker, 0.2, like_count=50),
    }
    await test_db.flush()
    posts["b_repost"] = _post(test_db, bob, 0.1, body="", target_id=posts["a1"].id)
    posts["b_quote"] = _post(test_db, bob, 4, body="so true", target_id=posts["a2"].id)
    test_db.add(Follow(follower_id=alice.id, followee_id=bob.id, created_at=NOW))
    await test_db.commit()
    test_db.expunge_all()
    return {"alice": alice, "bob": bob, "lurker": lurker, **posts}


@pytest.fixture
def store(test_db):
    return SqlContentStore(test_db)


async def test_get_followees(store, seeded):
    assert await store.get_followees(AccountId(seeded["alice"].id)) == [seeded["bob"].id]
    assert await store.get_followees(AccountId(seeded["bob"].id)) == []


async def test_posts_by_authors_newest_first_without_deleted(store, seeded):
    posts = await store.get_posts_by_authors([AccountId(seeded["alice"].id)], None, 10)
    assert [p.id for p in posts] == [seeded["a1"].id, seeded["a2"].id]
    assert posts[0].created_at.tzinfo is not None


async def test_posts_by_authors_since_and_empty_authors(store, seeded):
    since = NOW - timedelta(hours=1.5)
    posts = await store.get_posts_by_authors([AccountId(seeded["alice"].id)], since, 10)
    assert [p.id for p in posts] == [seeded["a1"].id]
    assert await store.get_posts_by_authors([], None, 10) == []


async def test_posts_by_authors_activated_only_filters_before_limit(store, seeded, test_db):
    for i in range(3):
        _post(test_db, seeded["lurker"], 0.05 + i * 0.01)
    await test_db.commit()
    authors = [AccountId(seeded["lurker"].id), AccountId(seeded["alice"].id)]

    everyone = await store.get_posts_by_authors(authors, None, 2)
    activated = await store.get_posts_by_authors(authors, None, 2, activated_only=True)

    assert all(p.author_id == seeded["lurker"].id for p in everyone)
    assert [p.id for p in activated] == [seeded["a1"].id, seeded["a2"].id]


async def test_replies_newest_first_without_deleted(store, seeded, test_db):
    parent = seeded["a1"]
    older = _post(test_db, seeded["bob"], 0.8, parent_id=parent.id)
    newer = _post(test_db, seeded["lurker"], 0.4, parent_id=parent.id)
    _post(test_db, seeded["bob"], 0.3, parent_id=parent.id, is_deleted=True)
    _post(test_db, seeded["bob"], 0.2, parent_id=seeded["a2"].id)
    await test_db.commit()

    replies = await store.get_replies(PostId(parent.id), 10)
    assert [p.id for p in replies] == [newer.id, older.id]
    assert replies[0].parent_id == parent.id

    rest = await store.get_replies(PostId(parent.id), 10, decode_cursor(cursor_after(replies[:1], 1)))
    assert [p.id for p in rest] == [older.id]


async def test_bookmarked_posts_by_bookmark_time(store, seeded, test_db):
    alice = seeded["alice"]
    marks = [("b_quote", 3), ("a2", 1), ("b1", 2), ("a_deleted", 0.5)]
    for key, hours_ago in marks:
        test_db.add(Bookmark(
            account_id=alice.id, post_id=seeded[key].id,
            created_at=NOW - timedelta(hours=hours_ago),
        ))
    test_db.add(Bookmark(account_id=seeded["bob"].id, post_id=seeded["a1"].id, created_at=NOW))
    await test_db.commit()

    first = await store.get_bookmarked_posts(AccountId(alice.id), 2)
    assert [b.post.id for b in first] == [seeded["a2"].id, seeded["b1"].id]
    assert first[0].bookmarked_at == NOW - timedelta(hours=1)

    before = decode_cursor(bookmark_cursor_after(first, 2))
    rest = await store.get_bookmarked_posts(AccountId(alice.id), 10, before)
    assert [b.post.id for b in rest] == [seeded["b_quote"].id]


async def test_variant_decoded_from_columns(store, seeded):
    by_id = await store.get_posts_by_ids(
        [PostId(seeded["b_repost"].id), PostId(seeded["b_quote"].id)],
    )
    assert isinstance(by_id[seeded["b_repost"].id].kind, Repost)
    assert isinstance(by_id[seeded["b_quote"].id].kind, Quote)


async def test_point_read_returns_deleted(store, seeded):
    record = await store.get_post_by_id(PostId(seeded["a_deleted"].id))
    assert record.tombstoned
    assert await store.get_post_by_id(PostId(uuid4())) is None


async def test_global_recent_pages_with_cursor(store, seeded):
    first = await store.get_global_recent(2)
    before = decode_cursor(cursor_after(first, 2))
    second = await store.get_global_recent(10, before)

    ids = [p.id for p in first + second]
    assert seeded["g1"].id not in ids
    assert seeded["a_deleted"].id not in ids
    assert len(ids) == len(set(ids)) == 5


async def test_trending_candidates_need_engagement_and_claimed_author(store, seeded):
    candidates = await store.get_trending_candidates(NOW - timedelta(hours=48))
    assert {p.id for p in candidates} == {seeded["a1"].id, seeded["b1"].id}


async def test_engagement_counts(store, seeded):
    counts = await store.get_engagement_counts(PostId(seeded["a1"].id))
    assert counts.like_count == 3
    assert await store.get_engagement_counts(PostId(uuid4())) is None


async def test_viewer_interactions(store, seeded, test_db):
    alice, bob = seeded["alice"], seeded["bob"]
    test_db.add(Like(account_id=alice.id, post_id=seeded["b1"].id, created_at=NOW))
    test_db.add(Bookmark(account_id=alice.id, post_id=seeded["b_quote"].id, created_at=NOW))
    await test_db.commit()

    ids = [PostId(seeded[k].id) for k in ("a1", "b1", "b_quote")]
    alice_state = await store.get_viewer_interactions(AccountId(alice.id), ids)
    bob_state = await store.get_viewer_interactions(AccountId(bob.id), ids)

    assert alice_state.liked == {seeded["b1"].id}
    assert alice_state.bookmarked == {seeded["b_quote"].id}
    assert alice_state.reposted == frozenset()
    assert bob_state.reposted == {seeded["a1"].id}


async def test_recent_liked_authors_most_recent_first(store, seeded, test_db):
    alice, bob = seeded["alice"], seeded["bob"]
    test_db.add(Like(account_id=bob.id, post_id=seeded["a1"].id, created_at=NOW - timedelta(hours=5)))
    test_db.add(Like(account_id=bob.id, post_id=seeded["g1"].id, created_at=NOW - timedelta(hours=1)))
    test_db.add(Like(account_id=bob.id, post_id=seeded["b1"].id, created_at=NOW - timedelta(days=9)))
    await test_db.commit()

    authors = await store.get_recent_liked_authors(
        AccountId(bob.id), NOW - timedelta(days=7), 10,
    )
    assert authors == [seeded["lurker"].id, alice.id]


async def test_likers_among_followees(store, seeded, test_db):
    bob = seeded["bob"]
    test_db.add(Like(account_id=bob.id, post_id=seeded["g1"].id, created_at=NOW - timedelta(hours=2)))
    test_db.add(Like(account_id=seeded["lurker"].id, post_id=seeded["a2"].id, created_at=NOW))
    await test_db.commit()

    likes = await store.get_likers_among_followees(
        AccountId(seeded["alice"].id), NOW - timedelta(hours=24),
    )
    assert [(l.actor_id, l.post_id) for l in likes] == [(bob.id, seeded["g1"].id)]


async def test_illegal_row_skipped(store, seeded, test_db):
    _post(test_db, seeded["alice"], 0.3, body="")
    await test_db.commit()
    posts = await store.get_posts_by_authors([AccountId(seeded["alice"].id)], None, 10)
    assert [p.id for p in posts] == [seeded["a1"].id, seeded["a2"].id]


async def test_database_error_becomes_store_unavailable(store, monkeypatch):
    async def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(store.db, "execute", broken)
    with pytest.raises(ContentStoreUnavailableError) as exc_info:
        await store.get_followees(AccountId(uuid4()))
    assert exc_info.value.operation == "get_followees"
