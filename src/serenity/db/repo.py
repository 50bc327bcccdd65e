"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries so stores and scripts never build
queries themselves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from serenity.db.schema import ProgressRecord

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession"]


# ============================================================================
# Progress Record Repository
# ============================================================================


def get_progress_payload(session: DbSession, subject_key: str) -> str | None:
    """Get the stored payload for a subject, or None if absent."""
    record = session.get(ProgressRecord, subject_key)
    return record.payload_json if record else None


def upsert_progress_payload(session: DbSession, subject_key: str, payload_json: str) -> None:
    """Insert or fully replace the payload for a subject.

    Does not commit; callers decide the transaction boundary.
    """
    record = session.get(ProgressRecord, subject_key)
    if record is None:
        session.add(ProgressRecord(subject_key=subject_key, payload_json=payload_json))
    else:
        record.payload_json = payload_json
    session.flush()


def list_subject_keys(session: DbSession) -> list[str]:
    """Get all subject keys with a stored payload, sorted."""
    rows = session.query(ProgressRecord.subject_key).order_by(ProgressRecord.subject_key).all()
    return [row[0] for row in rows]


# ============================================================================
# Transaction Management
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    session.commit()


def rollback(session: DbSession) -> None:
    """Roll back current transaction."""
    session.rollback()
