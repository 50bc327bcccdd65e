"""Pydantic models for Serenity.

Two groups live here:
- Input contracts validated at the edge (SentimentAnalysis)
- The persisted wire format (StoredProgress) and read-side reports

Wire field names match the payloads already written by the mobile client
(sessions, lastSessionDate, emotionalStates[].date, topics, improvements).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from serenity.core.errors import InvalidObservationError
from serenity.models.domain import MAX_EMOTIONAL_STATES, OpaqueScore

TopicCountValue = Annotated[int, Field(ge=1)]


class SentimentAnalysis(BaseModel):
    """Externally computed emotional classification of a message.

    Accepts English field names (snake_case or camelCase) as well as the
    Spanish keys emitted by the upstream analyser.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    primary_emotion: str = Field(
        min_length=1,
        validation_alias=AliasChoices("primary_emotion", "primaryEmotion", "emocion_principal"),
    )
    intensity: OpaqueScore = Field(validation_alias=AliasChoices("intensity", "intensidad"))
    distress: OpaqueScore = Field(
        validation_alias=AliasChoices("distress", "nivel_de_angustia"),
    )
    detected_topics: str = Field(
        default="",
        validation_alias=AliasChoices("detected_topics", "detectedTopics", "temas_detectados"),
    )

    @classmethod
    def from_payload(cls, payload: Any) -> SentimentAnalysis:
        """Validate an untrusted analysis payload.

        Args:
            payload: Mapping (or model) produced by the analyser.

        Returns:
            Validated SentimentAnalysis.

        Raises:
            InvalidObservationError: If required fields are missing or mistyped.
        """
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise InvalidObservationError(f"Malformed sentiment analysis: {e}") from e


# ============================================================================
# Persisted wire format
# ============================================================================


class StoredEmotionalState(BaseModel):
    """One entry of the persisted emotionalStates array."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, allow_inf_nan=False)

    timestamp: datetime = Field(alias="date")
    emotion: str
    intensity: OpaqueScore = None
    distress: OpaqueScore = None


class StoredProgress(BaseModel):
    """Persisted progress summary (one per subject key).

    Decoding is strict: anything that is not a faithful summary encoding
    is rejected instead of being coerced or dropped.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    sessions: int = Field(ge=0, strict=True)
    last_session_date: date | None = Field(alias="lastSessionDate")
    emotional_states: list[StoredEmotionalState] = Field(
        alias="emotionalStates", max_length=MAX_EMOTIONAL_STATES
    )
    topics: dict[str, TopicCountValue]
    improvements: dict[str, Any] = Field(default_factory=dict)

    @field_validator("topics")
    @classmethod
    def _reject_blank_topics(cls, topics: dict[str, int]) -> dict[str, int]:
        for label in topics:
            if not label.strip():
                raise ValueError("topic labels must be non-empty")
        return topics


# ============================================================================
# Read-side reports
# ============================================================================

Trend = Literal["insufficient_data", "improving", "worsening", "positive", "negative", "stable"]


class TopicCount(BaseModel):
    """A topic label with its cumulative count."""

    topic: str
    count: int


class TrendReport(BaseModel):
    """Emotional trend over the retained window.

    Averages are None when the slice holds no numeric values.
    """

    trend: Trend
    message: str
    recent_avg_intensity: float | None = None
    older_avg_intensity: float | None = None
    recent_avg_distress: float | None = None
    older_avg_distress: float | None = None
    recent_positive_count: int = 0
    recent_negative_count: int = 0
    total_recent: int = 0
