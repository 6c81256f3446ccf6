"""
Unit tests for the monthly category breakdown.
"""

from __future__ import annotations

import pytest

from financial_query.category import CategoryResolver, monthly_category
from financial_query.schema import Dataset, Record
from financial_query.synonym_mapper import SynonymExpander
from financial_query.vocabulary import CATEGORY_CODES


def _record(sheet: str, item_code: str, value: float, month: str = "3") -> Record:
    return Record(
        year="2025",
        month=month,
        sheet=sheet,
        financial_type=sheet,
        data_type="Plant and Machinery",
        item_code=item_code,
        value=value,
        project="P",
    )


@pytest.fixture
def dataset() -> Dataset:
    return Dataset(
        project="P",
        records=(
            _record("Projection", "2.3", 75.0),
            _record("Projection", "2.3.1", 25.0),
            _record("Projection", "2.30", 999.0),
            _record("Committed Cost", "2.3", 60.0),
            _record("Cash Flow", "2.3", 50.0),
            _record("Cash Flow", "2.3", 48.0, month="2"),
            _record("Financial Status", "2.3", 500.0),
        ),
    )


@pytest.fixture
def resolver() -> CategoryResolver:
    return CategoryResolver()


# ======================================================================
# Detection
# ======================================================================

class TestDetect:
    def test_longest_keyword_wins(self, resolver: CategoryResolver) -> None:
        assert resolver.detect("monthly plant and machinery for march") == (
            "plant and machinery",
            "2.3",
        )

    def test_bracketed_keyword(self, resolver: CategoryResolver) -> None:
        assert resolver.detect("monthly manpower (labour) cost") == ("manpower (labour)", "2.5")

    def test_needs_trigger_word(self, resolver: CategoryResolver) -> None:
        assert resolver.detect("plant and machinery for march") is None

    def test_needs_category(self, resolver: CategoryResolver) -> None:
        assert resolver.detect("monthly report") is None

    def test_whole_words_only(self, resolver: CategoryResolver) -> None:
        assert resolver.detect("monthly planted trees") is None

    @pytest.mark.parametrize("keyword", sorted(CATEGORY_CODES))
    def test_keywords_survive_expansion(self, keyword: str) -> None:
        assert SynonymExpander().expand(keyword) == keyword

    @pytest.mark.parametrize(
        "question, expected",
        [
            ("monthly plant", ("plant and machinery", "2.3")),
            ("monthly labour", ("manpower (labour)", "2.5")),
            ("monthly subcon", ("subcontractor", "2.5")),
            ("monthly staff", ("manpower (mgt. & supervision)", "2.6")),
        ],
    )
    def test_expanded_shorthand(
        self, resolver: CategoryResolver, question: str, expected
    ) -> None:
        assert resolver.detect(SynonymExpander().expand(question)) == expected


# ======================================================================
# Breakdown
# ======================================================================

class TestBreakdown:
    def test_sums_per_sheet_with_sub_codes(
        self, resolver: CategoryResolver, dataset: Dataset
    ) -> None:
        breakdown = resolver.breakdown(dataset, "monthly plant and machinery for march")
        assert breakdown is not None
        assert breakdown.item_code == "2.3"
        assert breakdown.month == "3"
        assert dict(breakdown.totals) == {
            "Projection": 100.0,
            "Committed Cost": 60.0,
            "Accrual": 0.0,
            "Cash Flow": 50.0,
        }
        assert [sheet for sheet, _ in breakdown.totals] == [
            "Projection", "Committed Cost", "Accrual", "Cash Flow",
        ]

    def test_default_month(self, resolver: CategoryResolver, dataset: Dataset) -> None:
        breakdown = resolver.breakdown(dataset, "monthly plant and machinery", "2")
        assert breakdown is not None
        assert dict(breakdown.totals)["Cash Flow"] == pytest.approx(48.0)
        assert dict(breakdown.totals)["Projection"] == 0

    def test_not_a_category_question(
        self, resolver: CategoryResolver, dataset: Dataset
    ) -> None:
        assert resolver.breakdown(dataset, "what is the gross profit", "3") is None

    def test_module_level_function(self, dataset: Dataset) -> None:
        breakdown = monthly_category(dataset, "monthly plant and machinery for march")
        assert breakdown is not None
        assert breakdown.category == "plant and machinery"
        assert breakdown.to_dict()["totals"]["Committed Cost"] == pytest.approx(60.0)
