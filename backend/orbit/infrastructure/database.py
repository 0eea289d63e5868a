"""Database Session Manager — async connection pool, units of work, rollback and health checks.

Invariants:
    - Every session rolls back on any exception (no partial commits leak)
    - A unit of work commits exactly once, after its body completed cleanly
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions and timeouts mapped to TransientStorageError
      (core/errors.py): outcome unknown, retry is safe because every core
      operation is idempotent

Design Decisions:
    - Manager held on app.state, created in the FastAPI lifespan: no module-level
      singleton, tests build one around their own engine (ADR: explicit DI)
    - expire_on_commit=False: records are copied out after commit without lazy loads
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from orbit.core.errors import TransientStorageError
from orbit.infrastructure.repositories import SqlUnitOfWork

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(
        cls, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ) -> "DatabaseSessionManager":
        engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        return cls(engine)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise TransientStorageError("commit") from e
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise TransientStorageError("execute") from e
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise TransientStorageError("query") from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise TransientStorageError("unknown") from e
        except asyncio.TimeoutError as e:
            await session.rollback()
            logger.error("DB call timed out, outcome unknown")
            raise TransientStorageError("timeout") from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncGenerator[SqlUnitOfWork, None]:
        """One transaction: repositories share it, commit only on clean exit."""
        async with self.session() as session:
            yield SqlUnitOfWork(session)
            await session.commit()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
