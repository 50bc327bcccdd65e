"""Domain models for Serenity.

Pure Python dataclasses representing domain entities.
These models are independent of the wire format and the storage layer;
conversion happens in serenity.core.codec.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from serenity.core.clock import utc_now

if TYPE_CHECKING:
    from serenity.models.types import SentimentAnalysis

# Intensity and distress are supplied by the upstream analyser and kept as-is.
OpaqueScore = bool | int | float | str | None

# Size of the rolling emotional-state window (oldest evicted first).
MAX_EMOTIONAL_STATES = 30


# ============================================================================
# Progress Domain
# ============================================================================


@dataclass
class EmotionalStateSample:
    """One emotional state observed at a point in time."""

    timestamp: datetime
    emotion: str
    intensity: OpaqueScore = None
    distress: OpaqueScore = None


@dataclass
class ProgressSummary:
    """Persisted aggregate for one subject.

    Attributes:
        session_count: Number of distinct calendar days with an observation.
        last_session_date: Date of the observation that last advanced session_count.
        emotional_states: Most recent samples, oldest first.
        topic_frequency: Topic label -> occurrence count (always >= 1).
        improvements: Legacy free-form map, carried through untouched.
    """

    session_count: int = 0
    last_session_date: date | None = None
    emotional_states: list[EmotionalStateSample] = field(default_factory=list)
    topic_frequency: dict[str, int] = field(default_factory=dict)
    improvements: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def default(cls) -> ProgressSummary:
        """Summary used whenever the store has nothing for a subject."""
        return cls(
            session_count=0,
            last_session_date=None,
            emotional_states=[],
            topic_frequency={},
            improvements={},
        )


# ============================================================================
# Observation Domain
# ============================================================================


@dataclass
class ObservationInput:
    """A single update event for the aggregator.

    observed_at is the "current instant" of the call. It defaults to the
    wall clock at construction so callers can inject a fixed instant instead.
    """

    sentiment_analysis: SentimentAnalysis | None = None
    observed_at: datetime = field(default_factory=utc_now)
