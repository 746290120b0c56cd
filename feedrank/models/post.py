"""Post ORM — originals, replies, reposts and quotes in one table.

Invariants:
    - parent_id set → reply; target_id set with empty body → repost; with body → quote
    - parent_id and target_id are never both set (check constraint)
    - Rows are soft-deleted via is_deleted (tombstone), never removed
    - Counters are denormalized and maintained by the write side

Design Decisions:
    - Nullable columns here, tagged variant in core/posts.py: kind_from_columns converts on read
    - author eagerly joined: every read needs the author summary and async forbids lazy loads
    - (author_id, created_at) and (created_at) indexes serve every listing query
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from feedrank.db.base import Base


class Post(Base):
    """Post entity — the unit every feed ranks."""
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "parent_id IS NULL OR target_id IS NULL",
            name="ck_posts_reply_xor_repost",
        ),
        Index("ix_posts_author_created", "author_id", "created_at"),
        Index("ix_posts_created", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("accounts.id"), nullable=False,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("posts.id"), nullable=True,
    )
    target_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("posts.id"), nullable=True,
    )

    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reply_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    repost_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    edited_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # Relationships
    author: Mapped["Account"] = relationship("Account", lazy="joined")
