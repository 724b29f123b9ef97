"""Database engine and session helpers.

`Database` wraps the SQLModel/SQLAlchemy engine shared by every request.
The application builds one instance at import time from the configured
`DATABASE_URL`; tests build their own against an in-memory SQLite
database. Stores never reach for a global handle: they receive a
`Session` opened from this object.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from . import models  # noqa: F401  (registers tables on SQLModel.metadata)


class Database:
    """Owns the engine lifecycle: connect, create schema, dispose."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # a single shared connection keeps the in-memory schema alive
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, **kwargs)

    def create_all(self) -> None:
        """Create database tables using SQLModel metadata.

        Idempotent; existing tables are left untouched.
        """
        SQLModel.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session

    def get_session(self) -> Iterator[Session]:
        """Yield a database `Session` for FastAPI dependency injection.

        The generator yields a session and ensures it is closed when the
        request scope finishes.
        """
        with Session(self.engine) as session:
            yield session

    def dispose(self) -> None:
        self.engine.dispose()
