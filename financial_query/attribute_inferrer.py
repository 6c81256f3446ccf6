"""
Attribute Inference Layer.

Guesses which sheet, financial type and data type a question refers to by
scanning the distinct values actually present in the project's dataset.

* **Sheet** — questions without a date are about the canonical summary
  sheet.  Dated questions look for a sheet named in the question, then for
  a sheet keyword (``"cashflow"`` → ``"Cash Flow"``) whose sheet exists.
* **Financial type** — first dataset value with a word the question names
  (exactly, or as a large enough substring), else a fuzzy match.
* **Data type** — acronym table first, then the value sharing the most
  words with the question, else a fuzzy match.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from financial_query.config import MatchingConfig
from financial_query.fuzzy_matcher import FuzzyMatcher, covers_word
from financial_query.logging_setup import get_logger
from financial_query.schema import Dataset, InferredAttributes, ParsedDate
from financial_query.vocabulary import VocabularyConfig

logger = get_logger("attribute_inferrer")


class AttributeInferrer:
    """Infer sheet / financial type / data type for one question.

    Parameters
    ----------
    vocabulary:
        Sheet keywords, data-type acronyms and the canonical sheet name.
    matching:
        Word-coverage thresholds shared with the fuzzy matcher.
    matcher:
        Fallback matcher; built from *matching* when omitted.
    """

    def __init__(
        self,
        vocabulary: Optional[VocabularyConfig] = None,
        matching: Optional[MatchingConfig] = None,
        matcher: Optional[FuzzyMatcher] = None,
    ) -> None:
        self._vocab = vocabulary or VocabularyConfig()
        self._matching = matching or MatchingConfig()
        self._matcher = matcher or FuzzyMatcher(self._matching)
        self._keyword_patterns = [
            (re.compile(r"\b" + r"\s+".join(map(re.escape, kw.split())) + r"\b"), sheet)
            for kw, sheet in self._vocab.sheet_keywords.items()
        ]

    def infer(
        self,
        dataset: Dataset,
        tokens: Sequence[str],
        normalized_question: str,
        parsed_date: Optional[ParsedDate] = None,
        has_user_date: Optional[bool] = None,
    ) -> InferredAttributes:
        """Run all three inferences.

        ``has_user_date`` defaults to ``parsed_date.has_user_date``.
        """
        if has_user_date is None:
            has_user_date = parsed_date.has_user_date if parsed_date else False

        inferred = InferredAttributes(
            sheet=self.infer_sheet(dataset, normalized_question, has_user_date),
            financial_type=self.infer_financial_type(dataset, tokens),
            data_type=self.infer_data_type(dataset, tokens),
        )
        logger.info(
            "Inferred sheet=%r financial_type=%r data_type=%r",
            inferred.sheet,
            inferred.financial_type,
            inferred.data_type,
        )
        return inferred

    # ------------------------------------------------------------------ #
    # Sheet
    # ------------------------------------------------------------------ #

    def infer_sheet(
        self, dataset: Dataset, normalized_question: str, has_user_date: bool
    ) -> Optional[str]:
        if not has_user_date:
            return self._vocab.canonical_sheet

        question = normalized_question.lower()
        words = set(question.split())
        sheets = dataset.distinct("sheet")

        for sheet in sheets:
            name = " ".join(sheet.lower().split())
            if not name:
                continue
            if name in question or name.replace(" ", "") in question:
                return sheet
            if name.split()[0] in words:
                return sheet

        for pattern, sheet_name in self._keyword_patterns:
            if not pattern.search(question):
                continue
            for sheet in sheets:
                if sheet.strip().lower() == sheet_name.lower():
                    return sheet
            logger.debug(
                "Sheet keyword %r matched but sheet %r is not in the dataset",
                pattern.pattern,
                sheet_name,
            )
        return None

    # ------------------------------------------------------------------ #
    # Financial type
    # ------------------------------------------------------------------ #

    def infer_financial_type(
        self, dataset: Dataset, tokens: Sequence[str]
    ) -> Optional[str]:
        financial_types = dataset.distinct("financial_type")
        coverage = self._matching.word_coverage

        for ft in financial_types:
            ft_words = ft.lower().split()
            for token in tokens:
                if any(covers_word(token, w, coverage) for w in ft_words):
                    return ft

        return self._fuzzy_fallback(tokens, financial_types)

    # ------------------------------------------------------------------ #
    # Data type
    # ------------------------------------------------------------------ #

    def infer_data_type(self, dataset: Dataset, tokens: Sequence[str]) -> Optional[str]:
        data_types = dataset.distinct("data_type")

        from_acronym = self._data_type_from_acronym(tokens, data_types)
        if from_acronym is not None:
            return from_acronym

        best: Optional[str] = None
        best_count = 0
        for dt in data_types:
            count = self._word_overlap(tokens, dt.lower().split())
            if count > best_count:
                best, best_count = dt, count
        if best is not None:
            logger.debug("Data type %r matched %d question word(s)", best, best_count)
            return best

        return self._fuzzy_fallback(tokens, data_types)

    def _data_type_from_acronym(
        self, tokens: Sequence[str], data_types: List[str]
    ) -> Optional[str]:
        for acronym, phrases in self._vocab.data_type_acronyms.items():
            if acronym not in tokens:
                continue
            for phrase in phrases:
                for dt in data_types:
                    if phrase in dt.lower():
                        return dt
        return None

    def _word_overlap(self, tokens: Sequence[str], dt_words: List[str]) -> int:
        """Exact word matches plus partial matches for longer tokens."""
        matched: List[str] = []
        for token in tokens:
            if token in dt_words:
                matched.append(token)

        count = len(matched)
        coverage = self._matching.word_coverage
        for token in tokens:
            if token in matched or len(token) < self._matching.partial_min_length:
                continue
            for word in dt_words:
                longer, shorter = (token, word) if len(token) >= len(word) else (word, token)
                if shorter in longer and len(shorter) >= len(longer) * coverage:
                    count += 1
                    matched.append(token)
                    break
        return count

    # ------------------------------------------------------------------ #
    # Fallback
    # ------------------------------------------------------------------ #

    def _fuzzy_fallback(
        self, tokens: Sequence[str], vocabulary: List[str]
    ) -> Optional[str]:
        for token in tokens:
            match = self._matcher.closest_match(token, vocabulary)
            if match is not None:
                return match
        return None
