"""Infrastructure Layer — database access, the SQL Content Store, and logging.

Invariants:
    - All SQLAlchemy failures are mapped to ContentStoreUnavailableError
    - Adapters satisfy the Protocols declared in core/repository_protocols.py

Design Decisions:
    - Thin adapters over raw sessions (ADR: single responsibility)
"""
