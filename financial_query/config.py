"""
Configuration module for Financial Query.

All tuneable parameters (matching thresholds, scoring weights, paths and
feature flags) live here.  Nothing is hard-coded in business logic modules.
Static word tables live in ``financial_query.vocabulary``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from financial_query.vocabulary import VocabularyConfig


@dataclass(frozen=True)
class MatchingConfig:
    """Controls fuzzy and word-level matching across all layers."""

    # A token that is a substring of a word must cover at least this share
    # of the word's length to count as a word-level match.
    word_coverage: float = 0.5

    # Minimum Jaccard ratio of distinct characters before a candidate is
    # considered for edit-distance matching.
    char_similarity_threshold: float = 0.6

    # Best candidate is accepted only when its distance is at most
    # ``len(token) * max_edit_ratio``.
    max_edit_ratio: float = 0.5

    # Tokens shorter than this never earn a partial data-type match.
    partial_min_length: int = 4


@dataclass(frozen=True)
class ScoringConfig:
    """Weights used by the candidate scorer."""

    # Per question token, when the field contains the token
    token_financial_type: int = 5
    token_data_type: int = 8
    token_item_code: int = 3
    token_sheet: int = 2

    # Against the inferred attributes
    financial_type_exact: int = 40
    financial_type_partial: int = 30
    data_type_exact: int = 35
    data_type_partial: int = 25
    month_match: int = 20
    year_match: int = 15

    # Flat bonuses
    item_code_bonus: int = 5
    bonus_item_codes: Tuple[str, ...] = ("1", "2", "3")
    canonical_sheet_bonus: int = 2

    # Number of candidates surfaced per question
    top_n: int = 10


@dataclass(frozen=True)
class ValidationConfig:
    """Controls the record validation layer."""

    # Maximum allowed absolute value; larger ones are flagged as likely unit errors
    max_absolute_value: float = 1e15

    # When True, a numeric-looking month outside 1..12 drops the record;
    # when False, it is only a warning.
    error_on_bad_month: bool = False


@dataclass(frozen=True)
class PipelineConfig:
    """Top-level configuration aggregating all sub-configs."""

    matching: MatchingConfig = field(default_factory=MatchingConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    vocabulary: VocabularyConfig = field(default_factory=VocabularyConfig)

    # Logging level for the query audit trail
    log_level: int = logging.INFO

    # Optional path to a user-supplied synonym JSON file
    # (``{"word": "canonical phrase"}``) merged with the built-in table.
    custom_synonym_path: Optional[Path] = None

    # When True the pipeline raises if record validation drops any record
    # instead of answering from the remaining ones.
    strict_mode: bool = False
