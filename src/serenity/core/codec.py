"""Serialization between ProgressSummary and its stored JSON encoding.

encode_summary and decode_summary are exact inverses: every field read
back equals what was written, including empty lists, empty maps and a
null lastSessionDate.
"""

from __future__ import annotations

from pydantic import ValidationError

from serenity.core.errors import DeserializationError
from serenity.models.domain import EmotionalStateSample, ProgressSummary
from serenity.models.types import StoredEmotionalState, StoredProgress


def summary_to_stored(summary: ProgressSummary) -> StoredProgress:
    """Convert domain summary to wire model."""
    return StoredProgress(
        sessions=summary.session_count,
        last_session_date=summary.last_session_date,
        emotional_states=[
            StoredEmotionalState(
                timestamp=sample.timestamp,
                emotion=sample.emotion,
                intensity=sample.intensity,
                distress=sample.distress,
            )
            for sample in summary.emotional_states
        ],
        topics=dict(summary.topic_frequency),
        improvements=dict(summary.improvements),
    )


def stored_to_summary(stored: StoredProgress) -> ProgressSummary:
    """Convert wire model to domain summary."""
    return ProgressSummary(
        session_count=stored.sessions,
        last_session_date=stored.last_session_date,
        emotional_states=[
            EmotionalStateSample(
                timestamp=state.timestamp,
                emotion=state.emotion,
                intensity=state.intensity,
                distress=state.distress,
            )
            for state in stored.emotional_states
        ],
        topic_frequency=dict(stored.topics),
        improvements=dict(stored.improvements),
    )


def encode_summary(summary: ProgressSummary) -> str:
    """Serialize a summary to the JSON string written to the store.

    Args:
        summary: Summary to encode.

    Returns:
        JSON text using the persisted field names.
    """
    return summary_to_stored(summary).model_dump_json(by_alias=True)


def decode_summary(raw: str | bytes) -> ProgressSummary:
    """Parse a stored JSON payload back into a summary.

    Args:
        raw: Value previously returned by the store.

    Returns:
        Decoded ProgressSummary.

    Raises:
        DeserializationError: If the payload is not valid JSON or does not
            describe a valid summary.
    """
    try:
        stored = StoredProgress.model_validate_json(raw)
    except ValidationError as e:
        raise DeserializationError(f"Invalid progress payload: {e}") from e
    return stored_to_summary(stored)
