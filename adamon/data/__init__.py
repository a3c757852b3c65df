"""Scenario ingestion and replay drivers feeding ticks to the estimators."""
