"""Pydantic Schemas — response models for the timeline API.

Invariants:
    - Schemas describe the wire shape only; ranking types live in core/

Design Decisions:
    - Separate from core dataclasses: schemas are API contracts, core types are domain (ADR: DDD boundary)
"""
