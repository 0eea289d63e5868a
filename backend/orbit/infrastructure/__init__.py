"""Infrastructure Layer — storage, hashing, audit and logging adapters.

Invariants:
    - Implements the core Protocols; core never imports from here
    - All storage faults mapped to TransientStorageError at the session boundary

Design Decisions:
    - Adapters over raw clients (ADR: ExMA single responsibility)
"""
