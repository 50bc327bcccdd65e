#!/usr/bin/env python3
"""Seed a demo progress database.

Records two weeks of synthetic observations for a few demo subjects so the
stored summaries can be inspected (and checked by smoke_demo.py).

Usage:
    python scripts/seed_demo.py

This script:
1. Initializes the demo database (removing any previous one)
2. Replays observations day by day through ProgressAggregator
3. Prints each subject's summary and emotional trend
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from serenity.aggregation.progress import ProgressAggregator  # noqa: E402
from serenity.aggregation.trends import analyze_emotional_trends, top_topics  # noqa: E402
from serenity.db.session import get_db_session, init_db  # noqa: E402
from serenity.models.domain import ObservationInput  # noqa: E402
from serenity.models.types import SentimentAnalysis  # noqa: E402
from serenity.store.sql import SqlKeyValueStore  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "demo.db"
DEMO_START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
DEMO_DAYS = 14
MESSAGES_PER_DAY = 3

# subject -> daily (emotion, topics) script; distress walks from start to end
DEMO_SUBJECTS = {
    "demo-improving": (("ansiedad", "trabajo, sueño"), 8, 2),
    "demo-worsening": (("tristeza", "familia,soledad"), 2, 8),
    "demo-calm": (("calma", "rutina"), 4, 4),
}


def build_observation(emotion: str, topics: str, distress: int, when: datetime) -> ObservationInput:
    """Build one demo observation."""
    analysis = SentimentAnalysis(
        primary_emotion=emotion,
        intensity=5,
        distress=distress,
        detected_topics=topics,
    )
    return ObservationInput(sentiment_analysis=analysis, observed_at=when)


def seed_database() -> None:
    """Replay demo observations into the database."""
    if DEMO_DB_PATH.exists():
        DEMO_DB_PATH.unlink()
    init_db(DEMO_DB_PATH)

    with get_db_session(DEMO_DB_PATH) as session:
        aggregator = ProgressAggregator(SqlKeyValueStore(session))

        for subject_key, ((emotion, topics), start_distress, end_distress) in DEMO_SUBJECTS.items():
            print(f"Seeding {subject_key}...")
            for day in range(DEMO_DAYS):
                # Linear walk between start and end distress
                distress = round(
                    start_distress + (end_distress - start_distress) * day / (DEMO_DAYS - 1)
                )
                for message in range(MESSAGES_PER_DAY):
                    when = DEMO_START + timedelta(days=day, hours=message)
                    aggregator.record_observation(
                        subject_key, build_observation(emotion, topics, distress, when)
                    )
                # One message per day without analysis
                aggregator.record_observation(
                    subject_key,
                    ObservationInput(observed_at=DEMO_START + timedelta(days=day, hours=12)),
                )


def print_summaries() -> None:
    """Print stored summaries and trends."""
    with get_db_session(DEMO_DB_PATH) as session:
        aggregator = ProgressAggregator(SqlKeyValueStore(session))
        for subject_key in DEMO_SUBJECTS:
            summary = aggregator.load_summary(subject_key)
            report = analyze_emotional_trends(summary)
            topics = ", ".join(f"{t.topic}={t.count}" for t in top_topics(summary))
            print(f"  {subject_key}:")
            print(f"    sessions={summary.session_count} last={summary.last_session_date}")
            print(f"    states={len(summary.emotional_states)} topics: {topics}")
            print(f"    trend={report.trend} ({report.message})")


def main() -> int:
    """Main entry point."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Serenity Demo Seeding Script")
    print("=" * 60)

    print("\n[1/2] Seeding database...")
    seed_database()

    print("\n[2/2] Stored summaries:")
    print_summaries()

    print("\n" + "=" * 60)
    print("Demo seeding complete!")
    print(f"Database: {DEMO_DB_PATH}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
