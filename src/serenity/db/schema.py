"""Database schema for Serenity.

One table: progress_records, holding the serialized summary per subject.
The payload is opaque to the database; its structure is owned by
serenity.core.codec.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class ProgressRecord(Base):
    """Serialized progress summary for one subject.

    Invariant: subject_key is the primary key, so a write always replaces
    the whole payload for that subject.
    """

    __tablename__ = "progress_records"

    subject_key: Mapped[str] = mapped_column(String(128), primary_key=True)
    payload_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utc_now, onupdate=_utc_now
    )
