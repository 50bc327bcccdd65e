"""Error taxonomy for progress aggregation.

- PersistenceError: the key-value store failed to read or write
- DeserializationError: a stored payload exists but is not a valid summary
- InvalidObservationError: the caller supplied a malformed observation
"""


class ProgressError(Exception):
    """Base class for progress aggregation failures."""


class PersistenceError(ProgressError):
    """Store read or write failed; nothing was recorded."""

    def __init__(self, subject_key: str, operation: str, detail: str):
        self.subject_key = subject_key
        self.operation = operation
        super().__init__(f"Store {operation} failed for {subject_key!r}: {detail}")


class DeserializationError(ProgressError):
    """Stored payload is present but cannot be decoded into a summary."""


class InvalidObservationError(ProgressError, ValueError):
    """Observation payload is malformed (caller error)."""
