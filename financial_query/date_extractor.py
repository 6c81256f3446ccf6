"""
Date Extraction Layer.

Recovers the reporting period a question refers to.  Rules are tried in a
fixed order and the first rule that fires wins for each field:

1. a bare 4-digit year (``2025``);
2. only if no year yet: ``M/YY`` or ``MM/YY`` (``2/25`` → Feb 2025);
3. only if still no year: a bare 2-digit year (``feb 25`` → 2025);
4. a month name or 3-letter abbreviation, earliest in the text;
5. otherwise the caller's default month.

When two numeric tokens could both be read as a date the earlier rule wins;
the heuristic is deliberately not smarter than that.
"""

from __future__ import annotations

import re
from typing import Optional

from financial_query.logging_setup import get_logger
from financial_query.schema import ParsedDate
from financial_query.vocabulary import VocabularyConfig

logger = get_logger("date_extractor")


class DateExtractor:
    """Pure month / year extractor.

    Parameters
    ----------
    vocabulary:
        Supplies month names and the accepted year ranges.
    """

    _FOUR_DIGIT_RE = re.compile(r"(?<!\d)(\d{4})(?!\d)")
    _MONTH_YEAR_RE = re.compile(r"(?<![\d/])(\d{1,2})/(\d{2})(?![\d/])")
    _TWO_DIGIT_RE = re.compile(r"(?<![\d/.$])(\d{2})(?![\d/.%])")

    # Letter runs looked up as month names ("mar-25" → "mar", "margin" stays whole)
    _WORD_RE = re.compile(r"[a-z]+")

    def __init__(self, vocabulary: Optional[VocabularyConfig] = None) -> None:
        self._vocab = vocabulary or VocabularyConfig()

    def extract(self, text: str, default_month: Optional[str] = None) -> ParsedDate:
        """Return the month and year implied by *text*.

        ``default_month`` fills in the month when the text names none; the
        result's ``month_from_text`` flag tells the two cases apart.
        """
        lowered = (text or "").lower()
        month: Optional[str] = None
        year = self._four_digit_year(lowered)

        if year is None:
            month_year = self._month_slash_year(lowered)
            if month_year is not None:
                month, year = month_year

        if year is None:
            year = self._two_digit_year(lowered)

        if month is None:
            month = self._month_name(lowered)

        month_from_text = month is not None
        if month is None:
            month = default_month or None

        parsed = ParsedDate(month=month, year=year, month_from_text=month_from_text)
        logger.debug("extract_date: %r → %s", text, parsed)
        return parsed

    # ------------------------------------------------------------------ #
    # Individual rules
    # ------------------------------------------------------------------ #

    def _four_digit_year(self, text: str) -> Optional[str]:
        low, high = self._vocab.year_range
        for m in self._FOUR_DIGIT_RE.finditer(text):
            if low <= int(m.group(1)) <= high:
                return m.group(1)
        return None

    def _month_slash_year(self, text: str) -> Optional[tuple[str, str]]:
        for m in self._MONTH_YEAR_RE.finditer(text):
            month = int(m.group(1))
            if 1 <= month <= 12:
                return str(month), "20" + m.group(2)
        return None

    def _two_digit_year(self, text: str) -> Optional[str]:
        low, high = self._vocab.two_digit_year_range
        for m in self._TWO_DIGIT_RE.finditer(text):
            if low <= int(m.group(1)) <= high:
                return "20" + m.group(1)
        return None

    def _month_name(self, text: str) -> Optional[str]:
        lookup = self._vocab.month_lookup
        for word in self._WORD_RE.findall(text):
            month = lookup.get(word)
            if month is not None:
                return month
        return None


_DEFAULT_EXTRACTOR = DateExtractor()


def extract_date(text: str, default_month: Optional[str] = None) -> ParsedDate:
    """Extract a date with the built-in vocabulary."""
    return _DEFAULT_EXTRACTOR.extract(text, default_month)
