# This file wraps the SQLAlchemy engine and session factory used by the API services.
# It exists so the store handle is constructed explicitly by the application factory and injected,
# instead of living in module-level globals.
# The helper also centralizes schema creation, connectivity checks, and shutdown.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.api.db_models import Base

REQUIRED_TABLES: tuple[str, ...] = ("users", "services", "bookings")


def _build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        # one shared connection so an in-memory database survives across threadpool workers
        return create_engine(
            database_url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True, future=True)


class DatabaseClient:
    """Minimal SQLAlchemy wrapper for API read/write access."""

    def __init__(self, *, database_url: str) -> None:
        self._engine: Engine = _build_engine(database_url)
        self._session_factory = sessionmaker(
            bind=self._engine,
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on any error."""

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        Base.metadata.create_all(self._engine)

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, table_name: str) -> bool:
        return inspect(self._engine).has_table(table_name)

    def dispose(self) -> None:
        self._engine.dispose()
