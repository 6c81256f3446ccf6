"""
Monthly cost-category breakdown.

Answers questions such as "monthly plant for march": the category keyword
selects an item-code prefix (``"plant"`` → ``"2.3"``) and the figures for
that prefix and all its sub-codes are summed per cost sheet for one month.
"""

from __future__ import annotations

import re
from typing import List, Optional, Pattern, Tuple

from financial_query.date_extractor import DateExtractor
from financial_query.logging_setup import get_logger
from financial_query.metrics import sum_values
from financial_query.schema import CategoryBreakdown, Dataset, item_code_matches
from financial_query.vocabulary import VocabularyConfig

logger = get_logger("category")

TRIGGER_WORD = "monthly"


class CategoryResolver:
    """Detect and compute monthly category questions."""

    def __init__(
        self,
        vocabulary: Optional[VocabularyConfig] = None,
        date_extractor: Optional[DateExtractor] = None,
    ) -> None:
        self._vocab = vocabulary or VocabularyConfig()
        self._dates = date_extractor or DateExtractor(self._vocab)
        # Longest keyword first so "plant and machinery" beats "plant"
        self._patterns: List[Tuple[str, str, Pattern[str]]] = [
            (kw, code, re.compile(r"(?<!\w)" + re.escape(kw) + r"(?!\w)"))
            for kw, code in sorted(
                self._vocab.category_codes.items(), key=lambda kv: -len(kv[0])
            )
        ]

    def detect(self, normalized_question: str) -> Optional[Tuple[str, str]]:
        """``(keyword, item_code)`` when the question asks for a monthly category."""
        question = normalized_question.lower()
        if TRIGGER_WORD not in question.split():
            return None
        for keyword, code, pattern in self._patterns:
            if pattern.search(question):
                return keyword, code
        return None

    def breakdown(
        self,
        dataset: Dataset,
        normalized_question: str,
        default_month: Optional[str] = None,
    ) -> Optional[CategoryBreakdown]:
        """Sum the category per cost sheet, or ``None`` if not a category question."""
        detected = self.detect(normalized_question)
        if detected is None:
            return None
        keyword, code = detected

        month = self._dates.extract(normalized_question, default_month).month or ""
        totals = tuple(
            (
                sheet,
                sum_values(
                    r for r in dataset
                    if r.sheet == sheet
                    and r.month == month
                    and item_code_matches(r.item_code, code)
                ),
            )
            for sheet in self._vocab.category_sheets
        )
        logger.info(
            "Monthly category %r (item %s) for month %s: %s", keyword, code, month, totals
        )
        return CategoryBreakdown(category=keyword, item_code=code, month=month, totals=totals)


def monthly_category(
    dataset: Dataset,
    question: str,
    default_month: Optional[str] = None,
) -> Optional[CategoryBreakdown]:
    """Breakdown with the built-in vocabulary; *question* should be expanded."""
    return CategoryResolver().breakdown(dataset, question, default_month)
