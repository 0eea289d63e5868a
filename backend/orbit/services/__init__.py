"""Services Layer — workflows that orchestrate core rules around storage.

Invariants:
    - Every service takes a unit-of-work factory; none holds a session across calls
    - Authorization already happened in the gateway; services enforce data rules only

Design Decisions:
    - One service per use case for locality (ADR: ExMA no god objects)
"""
