# Overview: Transaction scope and row locking shared by the sale recorder and inventory adjuster.

from __future__ import annotations

from contextlib import contextmanager

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from .errors import PosError, StorageFailure


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; atomic() takes the database
    write lock up front there instead.
    """
    return query.with_for_update()


def _begin_immediate(session) -> None:
    """Open the SQLite transaction with a reserved write lock unless one is already open."""
    raw = session.connection().connection.driver_connection
    if not raw.in_transaction:
        session.execute(text("BEGIN IMMEDIATE"))


@contextmanager
def atomic(operation: str):
    """
    Run the enclosed statements as one unit of work.

    Commits on normal exit. On any exception the session is rolled back
    exactly once and the error propagates; SQLAlchemy errors (integrity
    violations, lock timeouts, lost optimistic-lock races) are re-raised as
    StorageFailure.

    The scope is the whole session: objects already pending when it opens
    are committed or rolled back together with the enclosed statements.
    """
    session = db.session
    try:
        if db.engine.dialect.name == "sqlite":
            _begin_immediate(session)
        yield session
        session.commit()
    except PosError as exc:
        session.rollback()
        current_app.logger.warning("%s rolled back: %s", operation, exc.message)
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.warning("%s rolled back after storage error: %s", operation, exc)
        raise StorageFailure(f"Failed to {operation}", details={"reason": type(exc).__name__}) from exc
    except Exception:
        session.rollback()
        current_app.logger.exception("%s rolled back after unexpected error", operation)
        raise
