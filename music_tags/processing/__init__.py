"""
Processing module for music-tags.

Bulk operations over the library:
    - cancellation: CancellationToken
    - gate: RunGate, mutual exclusion between processing and removal runs
    - runner: Bounded parallel passes with batched persistence
    - processor: TagProcessor (process_all_items, process_item,
                 propagate_tags_to_parents, remove_tags)
"""

from music_tags.processing.cancellation import CancellationToken
from music_tags.processing.gate import RunGate
from music_tags.processing.runner import (
    PassStats,
    calculate_max_concurrency,
    calculate_removal_concurrency,
    run_parallel,
)
from music_tags.processing.processor import RunSummary, TagProcessor

__all__ = [
    "CancellationToken",
    "RunGate",
    "PassStats",
    "calculate_max_concurrency",
    "calculate_removal_concurrency",
    "run_parallel",
    "RunSummary",
    "TagProcessor",
]
