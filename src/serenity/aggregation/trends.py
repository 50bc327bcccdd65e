"""Read-side views over a ProgressSummary.

Computes the emotional trend across the retained window and the most
frequent topics. Pure functions - no store access.
"""

from __future__ import annotations

import math

import numpy as np

from serenity.models.domain import EmotionalStateSample, OpaqueScore, ProgressSummary
from serenity.models.types import TopicCount, TrendReport

# Trend thresholds
MIN_SAMPLES_FOR_TREND = 3
MAX_RECENT_SAMPLES = 5
DISTRESS_SHIFT = 1.0  # Distress change (scale points) that counts as a trend

# Substring lexicons; labels come from the analyser in Spanish or English
POSITIVE_EMOTIONS = (
    "alegría",
    "felicidad",
    "entusiasmo",
    "calma",
    "gratitud",
    "esperanza",
    "joy",
    "happiness",
    "enthusiasm",
    "calm",
    "gratitude",
    "hope",
)
NEGATIVE_EMOTIONS = (
    "tristeza",
    "ansiedad",
    "miedo",
    "ira",
    "frustración",
    "culpa",
    "sadness",
    "anxiety",
    "fear",
    "anger",
    "frustration",
    "guilt",
)


def _as_number(value: OpaqueScore) -> float | None:
    """Best-effort numeric reading of an opaque score."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _mean(values: list[OpaqueScore]) -> float | None:
    numbers = [n for n in (_as_number(v) for v in values) if n is not None]
    if not numbers:
        return None
    return float(np.mean(numbers))


def _matches(emotion: str, lexicon: tuple[str, ...]) -> bool:
    label = emotion.lower()
    return any(word in label for word in lexicon)


def analyze_emotional_trends(summary: ProgressSummary) -> TrendReport:
    """Classify the direction of the subject's emotional state.

    The window is split into a recent slice (last min(5, ceil(n/2))
    samples) and the older remainder. Distress movement beyond
    DISTRESS_SHIFT wins; otherwise the majority sentiment of the recent
    slice decides; otherwise the trend is stable.

    Args:
        summary: Summary whose emotional_states are analysed.

    Returns:
        TrendReport with the trend label and the averages behind it.
    """
    history = summary.emotional_states
    if len(history) < MIN_SAMPLES_FOR_TREND:
        return TrendReport(
            trend="insufficient_data",
            message="More interactions are needed to analyse trends",
        )

    recent_size = min(MAX_RECENT_SAMPLES, math.ceil(len(history) / 2))
    recent = history[-recent_size:]
    older = history[:-recent_size]

    recent_intensity = _mean([s.intensity for s in recent])
    recent_distress = _mean([s.distress for s in recent])
    older_intensity = _mean([s.intensity for s in older]) if older else recent_intensity
    older_distress = _mean([s.distress for s in older]) if older else recent_distress

    positive = sum(1 for s in recent if _matches(s.emotion, POSITIVE_EMOTIONS))
    negative = sum(1 for s in recent if _matches(s.emotion, NEGATIVE_EMOTIONS))

    has_distress = recent_distress is not None and older_distress is not None
    if has_distress and recent_distress < older_distress - DISTRESS_SHIFT:
        trend, message = "improving", "Distress has decreased in recent conversations"
    elif has_distress and recent_distress > older_distress + DISTRESS_SHIFT:
        trend, message = "worsening", "Distress has increased in recent conversations"
    elif positive > len(recent) / 2:
        trend, message = "positive", "Positive emotions predominate in recent conversations"
    elif negative > len(recent) / 2:
        trend, message = "negative", "Negative emotions predominate in recent conversations"
    else:
        trend, message = "stable", "Emotional state is relatively stable"

    return TrendReport(
        trend=trend,
        message=message,
        recent_avg_intensity=recent_intensity,
        older_avg_intensity=older_intensity,
        recent_avg_distress=recent_distress,
        older_avg_distress=older_distress,
        recent_positive_count=positive,
        recent_negative_count=negative,
        total_recent=len(recent),
    )


def top_topics(summary: ProgressSummary, limit: int = 5) -> list[TopicCount]:
    """Most frequent topics, by count descending then label."""
    ranked = sorted(summary.topic_frequency.items(), key=lambda item: (-item[1], item[0]))
    return [TopicCount(topic=topic, count=count) for topic, count in ranked[:limit]]


def recent_emotional_states(summary: ProgressSummary, limit: int = 10) -> list[EmotionalStateSample]:
    """Last `limit` emotional states, oldest first."""
    if limit <= 0:
        return []
    return list(summary.emotional_states[-limit:])
