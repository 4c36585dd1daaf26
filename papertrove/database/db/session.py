"""
Database handle

Owns the SQLAlchemy engine (connection pool) and the session factory.
Constructed once at process start and disposed on shutdown:

    database = Database(Config.database_url)
    database.create_all()

    with database.session() as db:          # read-only work
        ...

    with database.transaction() as db:      # commit on success, rollback on error
        ...

    database.close()
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from papertrove.database.db.models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    def __init__(self, database_url: str, echo: bool = False):
        self.url = database_url

        connect_args = {}
        if database_url.startswith("sqlite"):
            # FastAPI runs sync endpoints in a threadpool
            connect_args["check_same_thread"] = False

        self.engine: Engine = create_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        if database_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    def create_all(self) -> None:
        """Create any missing tables"""
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        with self.SessionLocal() as db:
            yield db

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        with self.SessionLocal() as db:
            try:
                yield db
                db.commit()
            except Exception:
                db.rollback()
                raise

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")
