"""Aggregation module for subject progress.

- progress.py: write path, folds observations into the stored summary
- trends.py: read-side views (emotional trend, top topics)
- Forbidden: sentiment analysis itself, transport concerns
"""
