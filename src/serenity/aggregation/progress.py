"""Longitudinal progress aggregation.

Folds one observation at a time into a subject's persisted ProgressSummary:
- one session per UTC calendar day
- a rolling window of the MAX_EMOTIONAL_STATES most recent emotional states
- cumulative topic frequencies

Domain logic is pure (apply_observation); store access goes through
ProgressAggregator.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from serenity.core.clock import as_utc, session_date
from serenity.core.codec import decode_summary, encode_summary
from serenity.core.errors import DeserializationError, PersistenceError
from serenity.models.domain import (
    MAX_EMOTIONAL_STATES,
    EmotionalStateSample,
    ObservationInput,
    ProgressSummary,
)
from serenity.models.types import SentimentAnalysis
from serenity.store.base import KeyValueStore

logger = logging.getLogger(__name__)

__all__ = [
    "MAX_EMOTIONAL_STATES",
    "ProgressAggregator",
    "apply_observation",
    "parse_topics",
]


def parse_topics(detected_topics: str) -> list[str]:
    """Split a comma-separated topic string into labels.

    Labels are stripped; empty pieces are dropped; case and duplicates
    are preserved.

    Examples:
        >>> parse_topics("ansiedad, trabajo,ansiedad , , familia")
        ['ansiedad', 'trabajo', 'ansiedad', 'familia']
    """
    labels = []
    for piece in detected_topics.split(","):
        label = piece.strip()
        if label:
            labels.append(label)
    return labels


def apply_observation(summary: ProgressSummary, observation: ObservationInput) -> ProgressSummary:
    """Apply one observation to a summary.

    Pure function - no store access, and the input summary is not mutated.

    Args:
        summary: Summary as loaded from the store (or the default one).
        observation: Observation carrying the current instant and an
            optional sentiment analysis.

    Returns:
        New ProgressSummary with the observation merged in.
    """
    observed_at = as_utc(observation.observed_at)
    current_date = session_date(observed_at)

    session_count = summary.session_count
    last_session_date = summary.last_session_date
    if last_session_date != current_date:
        session_count += 1
        last_session_date = current_date

    emotional_states = list(summary.emotional_states)
    topic_frequency = dict(summary.topic_frequency)

    analysis = observation.sentiment_analysis
    if analysis is not None:
        emotional_states.append(
            EmotionalStateSample(
                timestamp=observed_at,
                emotion=analysis.primary_emotion,
                intensity=analysis.intensity,
                distress=analysis.distress,
            )
        )
        # Oldest entries drop first
        if len(emotional_states) > MAX_EMOTIONAL_STATES:
            emotional_states = emotional_states[-MAX_EMOTIONAL_STATES:]

        for label in parse_topics(analysis.detected_topics):
            topic_frequency[label] = topic_frequency.get(label, 0) + 1

    return ProgressSummary(
        session_count=session_count,
        last_session_date=last_session_date,
        emotional_states=emotional_states,
        topic_frequency=topic_frequency,
        improvements=dict(summary.improvements),
    )


def _validated_analysis(analysis: Any) -> SentimentAnalysis | None:
    """Accept a SentimentAnalysis, a raw payload mapping, or None."""
    if analysis is None or isinstance(analysis, SentimentAnalysis):
        return analysis
    return SentimentAnalysis.from_payload(analysis)


def _require_subject_key(subject_key: str) -> None:
    if not isinstance(subject_key, str) or not subject_key.strip():
        raise ValueError("subject_key must be a non-empty string")


class ProgressAggregator:
    """Loads, updates and persists progress summaries.

    Each record_observation call is one read-modify-write against a single
    key. There is no locking: two concurrent calls for the same subject may
    both read the same prior state, and the later write wins. Callers must
    serialize updates per subject. Calls for different subjects are
    independent.
    """

    def __init__(self, store: KeyValueStore):
        """Initialize aggregator.

        Args:
            store: Durable key-value store holding serialized summaries.
        """
        self.store = store

    def load_summary(self, subject_key: str) -> ProgressSummary:
        """Load the stored summary for a subject.

        Args:
            subject_key: Identifier of the subject.

        Returns:
            Stored summary, or ProgressSummary.default() if none is stored.

        Raises:
            ValueError: If subject_key is empty.
            PersistenceError: If the store read fails.
            DeserializationError: If the stored payload is corrupt. Corrupt
                history is never replaced by defaults.
        """
        _require_subject_key(subject_key)

        try:
            raw = self.store.get(subject_key)
        except Exception as e:
            logger.warning(f"Progress read failed for {subject_key!r}: {e}")
            raise PersistenceError(subject_key, "read", str(e)) from e

        if raw is None:
            logger.debug(f"No stored progress for {subject_key!r}, starting from defaults")
            return ProgressSummary.default()

        try:
            return decode_summary(raw)
        except DeserializationError:
            logger.warning(f"Stored progress for {subject_key!r} is corrupt; not updating it")
            raise

    def record_observation(
        self,
        subject_key: str,
        observation: ObservationInput,
    ) -> ProgressSummary:
        """Merge one observation into a subject's summary and persist it.

        Args:
            subject_key: Identifier of the subject.
            observation: Observation to apply. Its sentiment_analysis may be
                a SentimentAnalysis, a raw analyser payload, or None.

        Returns:
            The updated summary, exactly as persisted.

        Raises:
            ValueError: If subject_key is empty.
            InvalidObservationError: If the sentiment payload is malformed.
            PersistenceError: If the store read or write fails.
            DeserializationError: If the stored payload is corrupt.
        """
        _require_subject_key(subject_key)
        analysis = _validated_analysis(observation.sentiment_analysis)

        summary = self.load_summary(subject_key)
        updated = apply_observation(summary, replace(observation, sentiment_analysis=analysis))

        if updated.session_count != summary.session_count:
            logger.info(
                f"New session for {subject_key!r}: "
                f"#{updated.session_count} on {updated.last_session_date.isoformat()}"
            )

        try:
            payload = encode_summary(updated)
            self.store.set(subject_key, payload)
        except Exception as e:
            logger.warning(f"Progress write failed for {subject_key!r}: {e}")
            raise PersistenceError(subject_key, "write", str(e)) from e

        logger.debug(
            f"Recorded observation for {subject_key!r}: "
            f"{len(updated.emotional_states)} states, {len(updated.topic_frequency)} topics"
        )
        return updated
