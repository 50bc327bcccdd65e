"""Tests for progress aggregation.

Covers the update rules:
1. One session per calendar day, first observation always counts
2. Emotional-state window capped at 30, oldest evicted first
3. Topic counting from comma-separated labels
4. Observations without sentiment only touch session fields
5. Store failures leave the stored value untouched
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from serenity.aggregation.progress import (
    MAX_EMOTIONAL_STATES,
    ProgressAggregator,
    apply_observation,
    parse_topics,
)
from serenity.core.codec import encode_summary
from serenity.core.errors import (
    DeserializationError,
    InvalidObservationError,
    PersistenceError,
)
from serenity.models.domain import ObservationInput, ProgressSummary
from serenity.models.types import SentimentAnalysis
from serenity.store.memory import InMemoryKeyValueStore

SUBJECT = "user-001"


def make_observation(observed_at: datetime, emotion="calma", intensity=6, distress=2, topics=""):
    """Build an observation carrying a sentiment analysis."""
    analysis = SentimentAnalysis(
        primary_emotion=emotion,
        intensity=intensity,
        distress=distress,
        detected_topics=topics,
    )
    return ObservationInput(sentiment_analysis=analysis, observed_at=observed_at)


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose reads or writes can be made to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_get = False
        self.fail_set = False

    def get(self, key):
        if self.fail_get:
            raise OSError("disk unavailable")
        return super().get(key)

    def set(self, key, value):
        if self.fail_set:
            raise OSError("disk full")
        super().set(key, value)


class TestParseTopics:
    """Test comma-separated topic parsing."""

    def test_trims_and_drops_empty(self):
        """Whitespace is stripped and empty pieces are discarded."""
        assert parse_topics("ansiedad, trabajo,ansiedad , , familia") == [
            "ansiedad",
            "trabajo",
            "ansiedad",
            "familia",
        ]

    def test_empty_string(self):
        """Empty input yields no topics."""
        assert parse_topics("") == []
        assert parse_topics(" , ,") == []

    def test_case_is_preserved(self):
        """Labels are case-sensitive."""
        assert parse_topics("Trabajo,trabajo") == ["Trabajo", "trabajo"]


class TestSessionBoundary:
    """Test one-session-per-calendar-day rule."""

    def test_first_observation_starts_session(self, memory_store, day_one):
        """First call for a subject counts as a session."""
        aggregator = ProgressAggregator(memory_store)

        summary = aggregator.record_observation(SUBJECT, ObservationInput(observed_at=day_one))

        assert summary.session_count == 1
        assert summary.last_session_date == date(2024, 3, 1)

    def test_same_day_counts_once(self, memory_store, day_one):
        """Two calls on the same date yield a single session."""
        aggregator = ProgressAggregator(memory_store)

        aggregator.record_observation(SUBJECT, ObservationInput(observed_at=day_one))
        summary = aggregator.record_observation(
            SUBJECT, ObservationInput(observed_at=day_one + timedelta(hours=10))
        )

        assert summary.session_count == 1

    def test_day_rollover_increments(self, memory_store, day_one):
        """A call on the next date starts a second session."""
        aggregator = ProgressAggregator(memory_store)

        aggregator.record_observation(SUBJECT, ObservationInput(observed_at=day_one))
        summary = aggregator.record_observation(
            SUBJECT, ObservationInput(observed_at=day_one + timedelta(days=1))
        )

        assert summary.session_count == 2
        assert summary.last_session_date == date(2024, 3, 2)

    def test_date_is_compared_in_utc(self):
        """Instants in other time zones map to their UTC date."""
        summary = ProgressSummary(session_count=1, last_session_date=date(2024, 3, 2))
        # 2024-03-01 21:00 at UTC-5 is 2024-03-02 02:00 UTC
        local = datetime(2024, 3, 1, 21, 0, tzinfo=timezone(timedelta(hours=-5)))

        updated = apply_observation(summary, ObservationInput(observed_at=local))

        assert updated.session_count == 1

    def test_naive_instant_taken_as_utc(self):
        """Naive datetimes are interpreted as UTC."""
        updated = apply_observation(
            ProgressSummary.default(),
            ObservationInput(observed_at=datetime(2024, 3, 1, 23, 59)),
        )

        assert updated.last_session_date == date(2024, 3, 1)


class TestEmotionalWindow:
    """Test bounded emotional-state history."""

    def test_sample_recorded(self, memory_store, day_one):
        """Sentiment payload appends one sample with the call instant."""
        aggregator = ProgressAggregator(memory_store)

        summary = aggregator.record_observation(
            SUBJECT, make_observation(day_one, emotion="tristeza", intensity=8, distress=7)
        )

        assert len(summary.emotional_states) == 1
        sample = summary.emotional_states[0]
        assert sample.timestamp == day_one
        assert sample.emotion == "tristeza"
        assert sample.intensity == 8
        assert sample.distress == 7

    def test_window_keeps_30_most_recent(self, memory_store, day_one):
        """35 observations leave the 30 most recent in order."""
        aggregator = ProgressAggregator(memory_store)
        instants = [day_one + timedelta(minutes=i) for i in range(35)]

        for i, instant in enumerate(instants):
            summary = aggregator.record_observation(
                SUBJECT, make_observation(instant, emotion=f"e{i}")
            )

        assert len(summary.emotional_states) == MAX_EMOTIONAL_STATES == 30
        assert [s.emotion for s in summary.emotional_states] == [f"e{i}" for i in range(5, 35)]
        assert [s.timestamp for s in summary.emotional_states] == instants[5:]

    def test_window_persisted_bounded(self, memory_store, day_one):
        """Reloaded summary also holds 30 entries."""
        aggregator = ProgressAggregator(memory_store)
        for i in range(32):
            aggregator.record_observation(SUBJECT, make_observation(day_one + timedelta(seconds=i)))

        assert len(aggregator.load_summary(SUBJECT).emotional_states) == 30

    def test_opaque_scores_passed_through(self, day_one):
        """Intensity and distress are stored exactly as supplied."""
        updated = apply_observation(
            ProgressSummary.default(),
            make_observation(day_one, intensity="alta", distress=None),
        )

        assert updated.emotional_states[0].intensity == "alta"
        assert updated.emotional_states[0].distress is None


class TestTopicCounting:
    """Test cumulative topic frequencies."""

    def test_counts_from_single_observation(self, memory_store, day_one):
        """Duplicates count twice; blanks are ignored."""
        aggregator = ProgressAggregator(memory_store)

        summary = aggregator.record_observation(
            SUBJECT,
            make_observation(day_one, topics="ansiedad, trabajo,ansiedad , , familia"),
        )

        assert summary.topic_frequency == {"ansiedad": 2, "trabajo": 1, "familia": 1}
        assert "" not in summary.topic_frequency

    def test_counts_accumulate(self, memory_store, day_one):
        """Counts add up across observations."""
        aggregator = ProgressAggregator(memory_store)

        aggregator.record_observation(SUBJECT, make_observation(day_one, topics="trabajo"))
        summary = aggregator.record_observation(
            SUBJECT, make_observation(day_one, topics="trabajo, sueño")
        )

        assert summary.topic_frequency == {"trabajo": 2, "sueño": 1}

    def test_empty_topics_leave_map_unchanged(self, day_one):
        """An empty topic string adds nothing."""
        summary = ProgressSummary(topic_frequency={"trabajo": 3})

        updated = apply_observation(summary, make_observation(day_one, topics=""))

        assert updated.topic_frequency == {"trabajo": 3}


class TestNoSentiment:
    """Test observations without sentiment analysis."""

    def test_history_untouched(self, memory_store, day_one):
        """Only session fields change when no analysis is supplied."""
        aggregator = ProgressAggregator(memory_store)
        aggregator.record_observation(SUBJECT, make_observation(day_one, topics="trabajo"))
        before = memory_store.get(SUBJECT)
        before_summary = aggregator.load_summary(SUBJECT)

        summary = aggregator.record_observation(
            SUBJECT, ObservationInput(observed_at=day_one + timedelta(days=1))
        )

        assert summary.session_count == 2
        assert summary.emotional_states == before_summary.emotional_states
        assert summary.topic_frequency == before_summary.topic_frequency
        assert encode_summary(summary) != before
        assert memory_store.get(SUBJECT) == encode_summary(summary)

    def test_same_day_call_is_byte_identical(self, memory_store, day_one):
        """Same-day call without analysis rewrites an identical payload."""
        aggregator = ProgressAggregator(memory_store)
        aggregator.record_observation(SUBJECT, make_observation(day_one, topics="familia"))
        before = memory_store.get(SUBJECT)

        aggregator.record_observation(SUBJECT, ObservationInput(observed_at=day_one))

        assert memory_store.get(SUBJECT) == before

    def test_input_summary_not_mutated(self, day_one):
        """apply_observation returns a new summary."""
        summary = ProgressSummary.default()

        apply_observation(summary, make_observation(day_one, topics="trabajo"))

        assert summary == ProgressSummary.default()


class TestObservationValidation:
    """Test handling of caller-supplied analysis payloads."""

    def test_raw_payload_accepted(self, memory_store, day_one):
        """A mapping with analyser keys is validated and applied."""
        aggregator = ProgressAggregator(memory_store)
        observation = ObservationInput(
            sentiment_analysis={
                "emocion_principal": "ansiedad",
                "intensidad": 7,
                "nivel_de_angustia": 6,
                "temas_detectados": "trabajo, familia",
            },
            observed_at=day_one,
        )

        summary = aggregator.record_observation(SUBJECT, observation)

        assert summary.emotional_states[0].emotion == "ansiedad"
        assert summary.topic_frequency == {"trabajo": 1, "familia": 1}

    def test_malformed_payload_rejected_before_store(self, day_one):
        """Malformed payload raises and never touches the store."""
        store = FlakyStore()
        store.fail_get = True
        aggregator = ProgressAggregator(store)
        observation = ObservationInput(sentiment_analysis={"intensity": 5}, observed_at=day_one)

        with pytest.raises(InvalidObservationError):
            aggregator.record_observation(SUBJECT, observation)

        assert SUBJECT not in store

    def test_empty_subject_key_rejected(self, memory_store, day_one):
        """Subject key must be non-empty."""
        aggregator = ProgressAggregator(memory_store)

        with pytest.raises(ValueError):
            aggregator.record_observation("  ", ObservationInput(observed_at=day_one))

    @pytest.mark.parametrize("score", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_score_rejected(self, memory_store, day_one, score):
        """NaN and infinite scores cannot be stored and are rejected up front."""
        aggregator = ProgressAggregator(memory_store)
        observation = ObservationInput(
            sentiment_analysis={"primaryEmotion": "calma", "intensity": score, "distress": 2},
            observed_at=day_one,
        )

        with pytest.raises(InvalidObservationError):
            aggregator.record_observation(SUBJECT, observation)

        assert SUBJECT not in memory_store

    def test_bool_score_kept_and_reloaded(self, memory_store, day_one):
        """Boolean scores are not coerced to integers."""
        aggregator = ProgressAggregator(memory_store)

        recorded = aggregator.record_observation(
            SUBJECT, make_observation(day_one, intensity=True, distress=False)
        )
        reloaded = aggregator.load_summary(SUBJECT)

        assert recorded.emotional_states[0].intensity is True
        assert reloaded.emotional_states[0].intensity is True
        assert reloaded.emotional_states[0].distress is False
        assert reloaded == recorded


class TestFailureAtomicity:
    """Test that failed calls leave durable state untouched."""

    def test_write_failure_keeps_prior_state(self, day_one):
        """A failed write leaves the pre-call payload in the store."""
        store = FlakyStore()
        aggregator = ProgressAggregator(store)
        aggregator.record_observation(SUBJECT, make_observation(day_one, topics="trabajo"))
        before = store.get(SUBJECT)

        store.fail_set = True
        with pytest.raises(PersistenceError) as exc_info:
            aggregator.record_observation(
                SUBJECT, make_observation(day_one + timedelta(days=1), topics="familia")
            )

        assert exc_info.value.operation == "write"
        assert exc_info.value.subject_key == SUBJECT
        assert store.get(SUBJECT) == before

    def test_write_failure_on_first_call_stores_nothing(self, day_one):
        """No record appears if the very first write fails."""
        store = FlakyStore()
        store.fail_set = True

        with pytest.raises(PersistenceError):
            ProgressAggregator(store).record_observation(SUBJECT, make_observation(day_one))

        assert store.get(SUBJECT) is None

    def test_read_failure_raises_persistence_error(self, day_one):
        """A failed read is reported as PersistenceError."""
        store = FlakyStore()
        store.fail_get = True

        with pytest.raises(PersistenceError) as exc_info:
            ProgressAggregator(store).record_observation(SUBJECT, make_observation(day_one))

        assert exc_info.value.operation == "read"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_corrupt_payload_fails_closed(self, day_one):
        """Corrupt stored history is neither reset nor overwritten."""
        store = InMemoryKeyValueStore({SUBJECT: "{not json"})

        with pytest.raises(DeserializationError):
            ProgressAggregator(store).record_observation(SUBJECT, make_observation(day_one))

        assert store.get(SUBJECT) == "{not json"

    def test_invalid_shape_fails_closed(self, day_one):
        """Valid JSON with an invalid summary shape is rejected."""
        raw = '{"sessions": -1, "emotionalStates": [], "topics": {}, "lastSessionDate": null}'
        store = InMemoryKeyValueStore({SUBJECT: raw})

        with pytest.raises(DeserializationError):
            ProgressAggregator(store).record_observation(SUBJECT, make_observation(day_one))

        assert store.get(SUBJECT) == raw


class TestLoadSummary:
    """Test read-only loading."""

    def test_absent_subject_returns_default(self, memory_store):
        """Missing record yields the default summary without writing."""
        summary = ProgressAggregator(memory_store).load_summary("nobody")

        assert summary == ProgressSummary.default()
        assert len(memory_store) == 0

    def test_subjects_are_independent(self, memory_store, day_one):
        """Updates for one subject do not affect another."""
        aggregator = ProgressAggregator(memory_store)

        aggregator.record_observation("a", make_observation(day_one, topics="trabajo"))
        aggregator.record_observation("b", ObservationInput(observed_at=day_one))

        assert aggregator.load_summary("a").topic_frequency == {"trabajo": 1}
        assert aggregator.load_summary("b").topic_frequency == {}
