"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Quake record parsing
- Timestamp matching
- Geo/threshold calculations
- Fuzzy address matching
- Identity resolution and classification
- Message formatting

All functions here are deterministic and have no I/O.
"""

from src.core.earthquake import QuakeRecord, parse_quake_table
from src.core.temporal import same_minute, within_minutes
from src.core.geo import ThresholdPolicy, calculate_distance, magnitude_threshold_for
from src.core.similarity import address_similarity
from src.core.dedup import quake_changed
from src.core.ledger import coarse_key, fine_key, prune_and_order
from src.core.identity import MatchPolicy, resolve_identity
from src.core.classifier import Classification, classify_batch
from src.core.formatter import format_matrix_message, format_quake_summary

__all__ = [
    # Records
    "QuakeRecord",
    "parse_quake_table",
    # Time
    "same_minute",
    "within_minutes",
    # Geo
    "ThresholdPolicy",
    "calculate_distance",
    "magnitude_threshold_for",
    # Similarity
    "address_similarity",
    # Dedup
    "quake_changed",
    # Ledger
    "coarse_key",
    "fine_key",
    "prune_and_order",
    # Identity
    "MatchPolicy",
    "resolve_identity",
    # Classification
    "Classification",
    "classify_batch",
    # Formatter
    "format_matrix_message",
    "format_quake_summary",
]
