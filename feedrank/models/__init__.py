"""ORM Models — SQLAlchemy declarative models for the read-side schema.

Invariants:
    - All models inherit from Base (db/base.py)
    - The ranking service only SELECTs from these tables; writes belong to other services

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from feedrank.models.account import Account  # noqa: F401
from feedrank.models.post import Post  # noqa: F401
from feedrank.models.follow import Follow  # noqa: F401
from feedrank.models.like import Like  # noqa: F401
from feedrank.models.bookmark import Bookmark  # noqa: F401
