"""
Unit tests for the CandidateScorer.
"""

from __future__ import annotations

import pytest

from financial_query.config import ScoringConfig
from financial_query.schema import Dataset, ParsedDate, Record
from financial_query.scorer import CandidateScorer


def _record(
    financial_type: str = "Projection as at",
    data_type: str = "Gross Profit",
    item_code: str = "3",
    sheet: str = "Financial Status",
    month: str = "3",
    value: float = 0.0,
) -> Record:
    return Record(
        year="2025",
        month=month,
        sheet=sheet,
        financial_type=financial_type,
        data_type=data_type,
        item_code=item_code,
        value=value,
        project="P",
    )


@pytest.fixture
def scorer() -> CandidateScorer:
    return CandidateScorer(ScoringConfig())


TOKENS = ["projection", "gross", "profit"]


# ======================================================================
# Single record
# ======================================================================

class TestScore:
    def test_full_match(self, scorer: CandidateScorer) -> None:
        score, keywords = scorer.score(
            _record(),
            TOKENS,
            financial_type="Projection as at",
            data_type="Gross Profit",
            parsed_date=ParsedDate(month="3"),
        )
        # tokens 5 + 8 + 8, exact types 40 + 35, month 20, item 5, sheet 2
        assert score == 123
        assert keywords == (
            "projection", "gross", "profit", "Projection as at", "Gross Profit", "month 3",
        )

    def test_partial_inferred_type(self, scorer: CandidateScorer) -> None:
        score, keywords = scorer.score(
            _record(data_type="Acc. Gross Profit", item_code="3.1", sheet="Projection"),
            [],
            data_type="Gross Profit",
        )
        assert score == 25
        assert keywords == ("Gross Profit",)

    def test_repeated_tokens_add_up(self, scorer: CandidateScorer) -> None:
        record = _record(financial_type="X", item_code="9", sheet="Other")
        once, _ = scorer.score(record, ["gross"])
        twice, keywords = scorer.score(record, ["gross", "gross"])
        assert once == 8
        assert twice == 16
        assert keywords == ("gross",)

    def test_year_match(self, scorer: CandidateScorer) -> None:
        record = _record(financial_type="X", data_type="Y", item_code="9", sheet="Other")
        score, keywords = scorer.score(record, [], parsed_date=ParsedDate(month="4", year="2025"))
        assert score == 15
        assert keywords == ("year 2025",)

    def test_month_and_year_listed(self, scorer: CandidateScorer) -> None:
        record = _record(financial_type="X", item_code="9", sheet="Other")
        score, keywords = scorer.score(
            record, ["gross"], parsed_date=ParsedDate(month="3", year="2025")
        )
        assert score == 8 + 20 + 15
        assert keywords == ("gross", "month 3", "year 2025")

    def test_unrelated_record_scores_zero(self, scorer: CandidateScorer) -> None:
        record = _record(financial_type="X", data_type="Y", item_code="9", sheet="Other")
        assert scorer.score(record, TOKENS) == (0, ())


# ======================================================================
# Ranking
# ======================================================================

class TestRank:
    def test_at_most_top_n(self, scorer: CandidateScorer) -> None:
        dataset = Dataset(
            project="P",
            records=tuple(_record(value=float(i)) for i in range(15)),
        )
        candidates = scorer.rank(dataset, TOKENS)
        assert len(candidates) == 10
        assert [c.id for c in candidates] == list(range(1, 11))

    def test_sorted_descending(self, scorer: CandidateScorer) -> None:
        dataset = Dataset(
            project="P",
            records=(
                _record(financial_type="X", data_type="Y", item_code="9", sheet="Other", value=1),
                _record(value=2),
                _record(financial_type="Business Plan", value=3),
            ),
        )
        candidates = scorer.rank(dataset, TOKENS, financial_type="Projection as at")
        scores = [c.score for c in candidates]
        assert scores == sorted(scores, reverse=True)
        assert [c.value for c in candidates] == [2, 3, 1]

    def test_ties_keep_dataset_order(self, scorer: CandidateScorer) -> None:
        dataset = Dataset(
            project="P",
            records=tuple(_record(value=float(i)) for i in range(3)),
        )
        candidates = scorer.rank(dataset, TOKENS)
        assert [c.value for c in candidates] == [0.0, 1.0, 2.0]

    def test_zero_scores_included(self, scorer: CandidateScorer) -> None:
        record = _record(financial_type="X", data_type="Y", item_code="9", sheet="Other")
        candidates = scorer.rank(Dataset(project="P", records=(record,)), TOKENS)
        assert len(candidates) == 1
        assert candidates[0].score == 0
        assert candidates[0].matched_keywords == ()

    def test_empty_dataset(self, scorer: CandidateScorer) -> None:
        assert scorer.rank(Dataset(project="P"), TOKENS) == []

    def test_custom_top_n(self) -> None:
        scorer = CandidateScorer(ScoringConfig(top_n=2))
        dataset = Dataset(project="P", records=tuple(_record() for _ in range(5)))
        assert len(scorer.rank(dataset, TOKENS)) == 2
