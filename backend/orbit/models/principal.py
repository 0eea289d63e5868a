"""Principal ORM — persists an identity with its credentials and role.

Invariants:
    - id is UUID primary key; email is the unique natural key (stored lower-cased)
    - role is one of Role values, default STUDENT
    - password_hash holds a bcrypt hash, never a plaintext password

Design Decisions:
    - Table named "users": principals are the API's users (ADR: keep wire vocabulary)
    - role as String(20) over a native ENUM type: same column on PostgreSQL and
      SQLite, Role enum validates at the core boundary
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from orbit.core.domain_types import Role
from orbit.db.base import Base


class Principal(Base):
    """Principal entity — owner of progress records."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(320), nullable=False, unique=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.STUDENT.value, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
