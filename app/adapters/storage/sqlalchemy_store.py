"""SQLAlchemy-backed waitlist store.

Works against PostgreSQL in production and SQLite for local development and
tests. Each operation opens its own short-lived session.
"""

from __future__ import annotations

import logging
from datetime import timezone

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.adapters.storage.base import AbstractWaitlistStore
from app.adapters.storage.models import Base, WaitlistEntryRecord
from app.core.errors import DuplicateEmailAppError, StorageAppError
from app.schemas.waitlist import DUPLICATE_EMAIL_MESSAGE, WaitlistEntry

logger = logging.getLogger(__name__)


def _is_in_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def create_store_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine tuned for the configured backend.

    Args:
        url: SQLAlchemy database URL.
        echo: Log emitted SQL.

    Returns:
        Engine: Configured SQLAlchemy engine.
    """
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if _is_in_memory_sqlite(url):
            # One shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.close()

        return engine

    return create_engine(url, echo=echo, pool_pre_ping=True)


def init_schema(engine: Engine) -> None:
    """Create the waitlist table if it does not exist yet."""
    Base.metadata.create_all(bind=engine)


def _to_entry(record: WaitlistEntryRecord) -> WaitlistEntry:
    created_at = record.created_at
    # SQLite drops the offset; stored values are always UTC
    if created_at is not None and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return WaitlistEntry(id=record.id, email=record.email, created_at=created_at)


class SqlAlchemyWaitlistStore(AbstractWaitlistStore):
    """Waitlist store persisting entries through SQLAlchemy sessions."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_engine(cls, engine: Engine) -> "SqlAlchemyWaitlistStore":
        return cls(sessionmaker(bind=engine, autoflush=False, expire_on_commit=False))

    def insert(self, email: str) -> WaitlistEntry:
        record = WaitlistEntryRecord(email=email)
        with self._session_factory() as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                logger.info(
                    "waitlist.store.unique_violation",
                    extra={"error_type": type(exc.orig).__name__},
                )
                raise DuplicateEmailAppError(
                    code="duplicate_email",
                    message=DUPLICATE_EMAIL_MESSAGE,
                ) from exc
            except SQLAlchemyError as exc:
                session.rollback()
                raise StorageAppError(
                    code="storage_error",
                    message="Failed to save waitlist entry",
                ) from exc
            return _to_entry(record)

    def exists_by_email(self, email: str) -> bool:
        stmt = select(WaitlistEntryRecord.id).where(WaitlistEntryRecord.email == email).limit(1)
        try:
            with self._session_factory() as session:
                return session.execute(stmt).first() is not None
        except SQLAlchemyError as exc:
            raise StorageAppError(
                code="storage_error",
                message="Failed to look up waitlist entry",
            ) from exc

    def count(self) -> int:
        stmt = select(func.count()).select_from(WaitlistEntryRecord)
        try:
            with self._session_factory() as session:
                return int(session.scalar(stmt) or 0)
        except SQLAlchemyError as exc:
            raise StorageAppError(
                code="storage_error",
                message="Failed to count waitlist entries",
            ) from exc
