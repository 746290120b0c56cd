"""Pagination — limit bounds and the opaque feed cursor."""

import base64
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from feedrank.core.domain_types import PostId
from feedrank.core.errors import InvalidArgumentError
from feedrank.core.pagination import (
    FeedCursor, bookmark_cursor_after, cursor_after, decode_cursor, encode_cursor,
    validate_limit,
)
from feedrank.core.posts import BookmarkedPost
from tests.builders import NOW, make_post


@pytest.mark.parametrize("limit", [1, 20, 100])
def test_limit_in_range_accepted(limit):
    assert validate_limit(limit) == limit


@pytest.mark.parametrize("limit", [0, 101, -5])
def test_limit_out_of_range_rejected(limit):
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_limit(limit)
    assert exc_info.value.field == "limit"
    assert exc_info.value.http_status == 400


@pytest.mark.parametrize("limit", [True, 2.5, "10", None])
def test_non_integer_limit_rejected(limit):
    with pytest.raises(InvalidArgumentError):
        validate_limit(limit)


def test_cursor_decodes_to_same_position():
    cursor = FeedCursor(
        created_at=datetime(2026, 3, 1, 9, 30, 15, 123456, tzinfo=timezone.utc),
        post_id=PostId(uuid4()),
    )
    assert decode_cursor(encode_cursor(cursor)) == cursor


@pytest.mark.parametrize("token", [None, ""])
def test_missing_cursor_means_first_page(token):
    assert decode_cursor(token) is None


@pytest.mark.parametrize("token", [
    "not-base64!!",
    base64.urlsafe_b64encode(b"yesterday|abc").decode(),
    base64.urlsafe_b64encode(b"2026-03-01T00:00:00+00:00|not-a-uuid").decode(),
])
def test_malformed_cursor_rejected(token):
    with pytest.raises(InvalidArgumentError) as exc_info:
        decode_cursor(token)
    assert exc_info.value.field == "cursor"


def test_naive_cursor_timestamp_read_as_utc():
    raw = f"2026-03-01T00:00:00|{uuid4()}".encode()
    cursor = decode_cursor(base64.urlsafe_b64encode(raw).decode())
    assert cursor.created_at.tzinfo == timezone.utc


def test_short_page_has_no_next_cursor():
    assert cursor_after([make_post()], limit=2) is None
    assert cursor_after([], limit=1) is None


def test_full_page_cursor_points_at_last_item():
    page = [make_post(hours_ago=1), make_post(hours_ago=2)]
    cursor = decode_cursor(cursor_after(page, limit=2))
    assert cursor.post_id == page[-1].id
    assert cursor.created_at == page[-1].created_at


def test_bookmark_cursor_points_at_bookmark_time():
    post = make_post(hours_ago=30)
    page = [BookmarkedPost(bookmarked_at=NOW, post=make_post()), BookmarkedPost(bookmarked_at=NOW, post=post)]
    cursor = decode_cursor(bookmark_cursor_after(page, limit=2))
    assert cursor.created_at == NOW
    assert cursor.post_id == post.id
    assert bookmark_cursor_after(page[:1], limit=2) is None
