"""Core Layer — pure ranking logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic given an explicit `now`

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
    - TrendingCache is the only stateful object here, and it is injected, never global
"""
