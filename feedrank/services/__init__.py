"""Services Layer — async orchestration of Content Store reads around the pure core.

Invariants:
    - Services never mutate the Content Store
    - Every feed passes through ViewerStateResolver before it is returned

Design Decisions:
    - One service per ranking component for locality (ADR: no god objects)
"""
