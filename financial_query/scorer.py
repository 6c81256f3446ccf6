"""
Candidate Scoring Layer.

Scores every record of the project, not only the filtered ones, against
the question words and the inferred attributes, and returns the best
``top_n`` as selectable candidates.

The ranking always returns the best records available, even when none is
really relevant; low scores are weak evidence and are shown as such.
Candidate ids are display positions (1..N) and change from one question to
the next.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from financial_query.config import ScoringConfig
from financial_query.logging_setup import get_logger
from financial_query.schema import Candidate, Dataset, ParsedDate, Record
from financial_query.vocabulary import CANONICAL_SHEET

logger = get_logger("scorer")


class CandidateScorer:
    """Rank records by relevance to one question.

    Parameters
    ----------
    config:
        Scoring weights and the number of candidates to keep.
    canonical_sheet:
        Sheet that earns the summary-sheet bonus.
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        canonical_sheet: str = CANONICAL_SHEET,
    ) -> None:
        self._config = config or ScoringConfig()
        self._canonical_sheet = canonical_sheet

    def rank(
        self,
        dataset: Dataset,
        tokens: Sequence[str],
        sheet: Optional[str] = None,
        financial_type: Optional[str] = None,
        data_type: Optional[str] = None,
        parsed_date: Optional[ParsedDate] = None,
    ) -> List[Candidate]:
        """Return at most ``top_n`` candidates, best first, ids 1..N.

        ``sheet`` is accepted for symmetry with the filters; sheets are
        scored through the question words and the canonical-sheet bonus.
        """
        scored = [
            (record,) + self.score(record, tokens, financial_type, data_type, parsed_date)
            for record in dataset
        ]
        # sorted() is stable, so equal scores keep dataset order
        ranked = sorted(scored, key=lambda item: item[1], reverse=True)

        candidates = [
            Candidate(
                id=position,
                value=record.value,
                score=score,
                sheet=record.sheet,
                financial_type=record.financial_type,
                data_type=record.data_type,
                item_code=record.item_code,
                month=record.month,
                year=record.year,
                matched_keywords=keywords,
            )
            for position, (record, score, keywords) in enumerate(
                ranked[: self._config.top_n], start=1
            )
        ]
        if candidates:
            logger.info(
                "Ranked %d record(s); top score %d", len(scored), candidates[0].score
            )
        return candidates

    def score(
        self,
        record: Record,
        tokens: Sequence[str],
        financial_type: Optional[str] = None,
        data_type: Optional[str] = None,
        parsed_date: Optional[ParsedDate] = None,
    ) -> Tuple[int, Tuple[str, ...]]:
        """Score one record; returns ``(score, matched_keywords)``."""
        cfg = self._config
        score = 0
        keywords: dict[str, None] = {}

        ft = record.financial_type.lower()
        dt = record.data_type.lower()
        code = record.item_code.lower()
        sheet = record.sheet.lower()

        for token in tokens:
            for text, weight in (
                (ft, cfg.token_financial_type),
                (dt, cfg.token_data_type),
                (code, cfg.token_item_code),
                (sheet, cfg.token_sheet),
            ):
                if token in text:
                    score += weight
                    keywords.setdefault(token, None)

        if financial_type:
            if record.financial_type == financial_type:
                score += cfg.financial_type_exact
                keywords.setdefault(financial_type, None)
            elif financial_type.lower() in ft:
                score += cfg.financial_type_partial
                keywords.setdefault(financial_type, None)

        if data_type:
            if record.data_type == data_type:
                score += cfg.data_type_exact
                keywords.setdefault(data_type, None)
            elif data_type.lower() in dt:
                score += cfg.data_type_partial
                keywords.setdefault(data_type, None)

        if parsed_date is not None:
            if parsed_date.month and record.month == parsed_date.month:
                score += cfg.month_match
                keywords.setdefault(f"month {parsed_date.month}", None)
            if parsed_date.year and record.year == parsed_date.year:
                score += cfg.year_match
                keywords.setdefault(f"year {parsed_date.year}", None)

        if record.item_code in cfg.bonus_item_codes:
            score += cfg.item_code_bonus
        if record.sheet == self._canonical_sheet:
            score += cfg.canonical_sheet_bonus

        return score, tuple(keywords)
