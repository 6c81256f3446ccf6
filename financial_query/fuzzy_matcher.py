"""
Fuzzy Matching Layer.

Matches a single question token against a vocabulary of dataset values
(sheet names, financial types, data types).  Layers, strongest first:

* **Exact** — case-insensitive equality returns immediately.
* **Word** — the token equals a word of the entry, or is a substring
  covering at least ``word_coverage`` of that word.  Whole-word containment
  always beats an edit-distance match, even a numerically closer one.
* **Edit distance** — entries sharing too few distinct characters with the
  token are skipped; the rest are ranked by Levenshtein distance
  (``rapidfuzz``).

Whatever wins must lie within ``len(token) * max_edit_ratio`` of the token
(length difference for word matches, edit distance otherwise) or the
matcher returns ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from financial_query.config import MatchingConfig
from financial_query.logging_setup import get_logger

logger = get_logger("fuzzy_matcher")


@dataclass
class FuzzyCandidate:
    """The vocabulary entry chosen for a token."""

    value: str
    distance: float
    method: str  # "exact" | "word" | "edit"


def char_similarity(a: str, b: str) -> float:
    """Jaccard ratio of the distinct non-space characters of *a* and *b*."""
    chars_a = set(a.replace(" ", ""))
    chars_b = set(b.replace(" ", ""))
    union = chars_a | chars_b
    if not union:
        return 0.0
    return len(chars_a & chars_b) / len(union)


def covers_word(token: str, word: str, coverage: float = 0.5) -> bool:
    """True if *token* equals *word* or is a large enough substring of it."""
    if not token or not word:
        return False
    if token == word:
        return True
    return token in word and len(token) >= len(word) * coverage


class FuzzyMatcher:
    """Pick the vocabulary entry closest to a question token.

    Parameters
    ----------
    config:
        Coverage, similarity and distance thresholds.
    """

    def __init__(self, config: Optional[MatchingConfig] = None) -> None:
        self._config = config or MatchingConfig()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def closest_match(self, token: str, vocabulary: Sequence[str]) -> Optional[str]:
        """Return the best vocabulary entry for *token*, or ``None``."""
        candidate = self.match(token, vocabulary)
        return candidate.value if candidate is not None else None

    def match(self, token: str, vocabulary: Sequence[str]) -> Optional[FuzzyCandidate]:
        """Like ``closest_match`` but reports how the entry was chosen."""
        norm = (token or "").lower().strip()
        if not norm or not vocabulary:
            return None

        entries: List[Tuple[str, str]] = [
            (entry, entry.lower().strip())
            for entry in vocabulary
            if entry and entry.strip()
        ]

        for entry, entry_norm in entries:
            if entry_norm == norm:
                return FuzzyCandidate(value=entry, distance=0, method="exact")

        limit = len(norm) * self._config.max_edit_ratio

        word_hit = self._best_word_match(norm, entries)
        if word_hit is not None:
            return self._accept(norm, word_hit, limit)

        edit_hit = self._best_edit_match(norm, entries)
        if edit_hit is not None:
            return self._accept(norm, edit_hit, limit)

        logger.debug("No fuzzy candidates for %r", token)
        return None

    # ------------------------------------------------------------------ #
    # Layers
    # ------------------------------------------------------------------ #

    def _best_word_match(
        self, norm: str, entries: List[Tuple[str, str]]
    ) -> Optional[FuzzyCandidate]:
        best: Optional[FuzzyCandidate] = None
        for entry, entry_norm in entries:
            words = entry_norm.split()
            if not any(covers_word(norm, w, self._config.word_coverage) for w in words):
                continue
            distance = abs(len(entry_norm) - len(norm))
            if best is None or distance < best.distance:
                best = FuzzyCandidate(value=entry, distance=distance, method="word")
        return best

    def _best_edit_match(
        self, norm: str, entries: List[Tuple[str, str]]
    ) -> Optional[FuzzyCandidate]:
        best: Optional[FuzzyCandidate] = None
        for entry, entry_norm in entries:
            if char_similarity(norm, entry_norm) < self._config.char_similarity_threshold:
                continue
            distance = Levenshtein.distance(norm, entry_norm)
            if best is None or distance < best.distance:
                best = FuzzyCandidate(value=entry, distance=distance, method="edit")
        return best

    @staticmethod
    def _accept(
        norm: str, candidate: FuzzyCandidate, limit: float
    ) -> Optional[FuzzyCandidate]:
        if candidate.distance > limit:
            logger.debug(
                "Fuzzy best for %r is %r (%s, distance=%s) — above limit %.1f; rejected",
                norm,
                candidate.value,
                candidate.method,
                candidate.distance,
                limit,
            )
            return None
        logger.debug(
            "Fuzzy match: %r → %r (%s, distance=%s)",
            norm,
            candidate.value,
            candidate.method,
            candidate.distance,
        )
        return candidate


_DEFAULT_MATCHER = FuzzyMatcher()


def closest_match(token: str, vocabulary: Sequence[str]) -> Optional[str]:
    """Match *token* with the default thresholds."""
    return _DEFAULT_MATCHER.closest_match(token, vocabulary)
