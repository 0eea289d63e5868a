"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Principal and Lesson own Progress; deleting either cascades

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - All models imported here so Base.metadata is complete before create_all
      or Alembic autogenerate (ADR: standard SQLAlchemy pattern)
    - No ORM relationships: repositories query by key, and ON DELETE CASCADE
      lives in the foreign keys
"""

from orbit.models.principal import Principal  # noqa: F401
from orbit.models.lesson import Lesson  # noqa: F401
from orbit.models.progress import Progress  # noqa: F401
