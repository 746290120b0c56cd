"""Viewer State Resolver — batching: at most two store calls per batch."""

from uuid import uuid4

from feedrank.core.domain_types import AccountId, PostId
from feedrank.core.posts import UnavailablePost
from feedrank.services.viewer_state_resolver import ViewerStateResolver
from tests.builders import NOW, make_author, make_post


async def test_batch_uses_two_calls_regardless_of_size(store):
    viewer = make_author("viewer")
    targets = [make_post() for _ in range(5)]
    quotes = [make_post(target_id=t.id, body="q") for t in targets]
    store.add(*targets, *quotes)

    resolver = ViewerStateResolver(store)
    summaries = await resolver.resolve(quotes, viewer.id)

    assert len(summaries) == 5
    assert store.calls["get_posts_by_ids"] == 1
    assert store.calls["get_viewer_interactions"] == 1
    assert sum(store.calls.values()) == 2


async def test_anonymous_skips_interaction_lookup(store):
    post = make_post()
    store.add(post)
    [summary] = await ViewerStateResolver(store).resolve([post], None)
    assert store.calls["get_viewer_interactions"] == 0
    assert store.calls["get_posts_by_ids"] == 0
    assert not summary.viewer.is_liked


async def test_flags_cover_outer_and_nested_posts(store):
    viewer = make_author("viewer")
    target = make_post()
    quote = make_post(target_id=target.id, body="q")
    my_repost = make_post(author=viewer, target_id=quote.id, body="")
    store.add(target, quote, my_repost)
    store.like(viewer.id, target.id, NOW)
    store.bookmark(viewer.id, quote.id)

    [summary] = await ViewerStateResolver(store).resolve([quote], viewer.id)

    assert summary.viewer.is_bookmarked
    assert summary.viewer.is_reposted
    assert not summary.viewer.is_liked
    assert summary.referenced.viewer.is_liked


async def test_dangling_reference_becomes_stub(store):
    repost = make_post(target_id=PostId(uuid4()), body="")
    store.add(repost)
    [summary] = await ViewerStateResolver(store).resolve([repost], AccountId(uuid4()))
    assert isinstance(summary.referenced, UnavailablePost)


async def test_empty_batch_makes_no_calls(store):
    assert await ViewerStateResolver(store).resolve([], AccountId(uuid4())) == []
    assert sum(store.calls.values()) == 0
