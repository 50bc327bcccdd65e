"""SQLAlchemy-backed key-value store.

Each key maps to one row of progress_records. A set() is committed
immediately; on failure the session is rolled back so the previously
committed value remains the stored one.
"""

from __future__ import annotations

import logging

from serenity.db import repo
from serenity.db.repo import DbSession
from serenity.store.base import KeyValueStore

logger = logging.getLogger(__name__)


class SqlKeyValueStore(KeyValueStore):
    """Key-value store over the progress_records table."""

    def __init__(self, session: DbSession):
        """Initialize store.

        Args:
            session: Database session used for reads and commits.
        """
        self.session = session

    def get(self, key: str) -> str | None:
        return repo.get_progress_payload(self.session, key)

    def set(self, key: str, value: str) -> None:
        try:
            repo.upsert_progress_payload(self.session, key, value)
            repo.commit(self.session)
        except Exception:
            logger.warning(f"Rolling back progress write for {key!r}")
            repo.rollback(self.session)
            raise
