"""
Unit tests for the DateExtractor.
"""

from __future__ import annotations

import pytest

from financial_query.date_extractor import DateExtractor, extract_date
from financial_query.vocabulary import VocabularyConfig


@pytest.fixture
def extractor() -> DateExtractor:
    return DateExtractor()


# ======================================================================
# Years
# ======================================================================

class TestYear:
    def test_four_digit_year(self, extractor: DateExtractor) -> None:
        assert extractor.extract("gp for 2025").year == "2025"

    @pytest.mark.parametrize("text", ["gp 2019", "gp 2050", "code 12345"])
    def test_four_digit_out_of_range(self, extractor: DateExtractor, text: str) -> None:
        assert extractor.extract(text).year is None

    def test_upper_bound_inclusive(self, extractor: DateExtractor) -> None:
        assert extractor.extract("gp 2049").year == "2049"

    def test_two_digit_year(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("feb 25")
        assert parsed.year == "2025"
        assert parsed.month == "2"

    @pytest.mark.parametrize("text", ["value 45", "123 items", "$25 budget", "25% done"])
    def test_two_digit_ignored(self, extractor: DateExtractor, text: str) -> None:
        assert extractor.extract(text).year is None

    def test_custom_year_range(self) -> None:
        vocab = VocabularyConfig(year_range=(2010, 2019))
        assert DateExtractor(vocab).extract("gp 2015").year == "2015"


# ======================================================================
# Month / year pairs
# ======================================================================

class TestMonthSlashYear:
    def test_single_digit_month(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("gp 2/25")
        assert (parsed.month, parsed.year) == ("2", "2025")

    def test_two_digit_month(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("cash flow 12/24")
        assert (parsed.month, parsed.year) == ("12", "2024")

    def test_invalid_month_ignored(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("13/25", default_month="4")
        assert parsed.month == "4"
        assert parsed.year is None

    def test_four_digit_year_wins(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("2/25 in 2024")
        assert parsed.year == "2024"
        assert parsed.month is None

    def test_month_name_does_not_override(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("march 2/25")
        assert parsed.month == "2"


# ======================================================================
# Month names
# ======================================================================

class TestMonthName:
    def test_full_name(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("march 2025")
        assert (parsed.month, parsed.year) == ("3", "2025")
        assert parsed.month_from_text

    def test_abbreviation_case_insensitive(self, extractor: DateExtractor) -> None:
        assert extractor.extract("GP for Sep").month == "9"

    def test_trailing_punctuation(self, extractor: DateExtractor) -> None:
        assert extractor.extract("what was gp in march?").month == "3"

    @pytest.mark.parametrize(
        "text, month, year",
        [
            ("gp for mar-25", "3", "2025"),
            ("gp for march/2025", "3", "2025"),
            ("gp 25-mar", "3", "2025"),
            ("gp jan-2025", "1", "2025"),
            ("gp (feb)", "2", None),
        ],
    )
    def test_month_joined_to_numbers(
        self, extractor: DateExtractor, text: str, month: str, year
    ) -> None:
        parsed = extractor.extract(text, default_month="6")
        assert (parsed.month, parsed.year) == (month, year)
        assert parsed.month_from_text

    def test_earliest_month_wins(self, extractor: DateExtractor) -> None:
        assert extractor.extract("mar and april").month == "3"

    def test_words_containing_month_names(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("margin for decembers", default_month="6")
        assert parsed.month == "6"
        assert not parsed.month_from_text


# ======================================================================
# Defaults
# ======================================================================

class TestDefaults:
    def test_default_month(self, extractor: DateExtractor) -> None:
        parsed = extractor.extract("what is the gp", default_month="3")
        assert parsed.month == "3"
        assert parsed.year is None
        assert not parsed.month_from_text
        assert not parsed.has_user_date

    def test_no_default(self, extractor: DateExtractor) -> None:
        assert extractor.extract("what is the gp").month is None

    def test_year_alone_is_user_date(self, extractor: DateExtractor) -> None:
        assert extractor.extract("gp 2025", default_month="3").has_user_date

    def test_month_alone_is_user_date(self, extractor: DateExtractor) -> None:
        assert extractor.extract("gp for may", default_month="3").has_user_date

    def test_module_level_function(self) -> None:
        parsed = extract_date("jan 2026", "5")
        assert (parsed.month, parsed.year) == ("1", "2026")
