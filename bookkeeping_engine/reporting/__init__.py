"""Reporting helpers for categorized transactions."""

from .summary import (
    results_to_dataframe,
    build_category_summary,
    build_source_summary,
    build_review_queue,
)

__all__ = [
    "results_to_dataframe",
    "build_category_summary",
    "build_source_summary",
    "build_review_queue",
]
