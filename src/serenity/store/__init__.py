"""Key-value store boundary.

The aggregator only needs get/set of a serialized summary by key.

Structure:
- store/base.py    - KeyValueStore interface
- store/memory.py  - dict-backed store (tests, single-process use)
- store/sql.py     - SQLAlchemy-backed store (progress_records table)
"""

from serenity.store.base import KeyValueStore
from serenity.store.memory import InMemoryKeyValueStore
from serenity.store.sql import SqlKeyValueStore

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqlKeyValueStore",
]
