"""
Pipeline Orchestrator.

The central entry point that wires together every layer:

    Records  →  Validator  →  Synonym Expander  →  Date Extractor
             →  (monthly category)  →  Attribute Inferrer
             →  Filter & Relax Engine  →  Formatter
             ↘  Candidate Scorer (all project records)

Usage
-----
>>> from financial_query.pipeline import FinancialQueryPipeline
>>> from financial_query.config import PipelineConfig
>>>
>>> pipe = FinancialQueryPipeline(PipelineConfig())
>>> answer = pipe.answer(dataset, "what is the projected gp", default_month="3")
>>> print(answer.text)
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Union

from financial_query.attribute_inferrer import AttributeInferrer
from financial_query.category import CategoryResolver
from financial_query.config import PipelineConfig
from financial_query.dataset_builder import DatasetBuilder
from financial_query.date_extractor import DateExtractor
from financial_query.filter_engine import resolve
from financial_query.formatter import (
    EMPTY_DATASET_MESSAGE,
    format_answer,
    format_category,
    format_no_match,
)
from financial_query.fuzzy_matcher import FuzzyMatcher
from financial_query.logging_setup import configure_logging, get_logger
from financial_query.metrics import compute_metrics, sum_values
from financial_query.normalizer import ValueNormalizer, tokenize
from financial_query.schema import (
    STATUS_EMPTY_DATASET,
    STATUS_NO_MATCH,
    Dataset,
    ProjectMetrics,
    QueryAnswer,
)
from financial_query.scorer import CandidateScorer
from financial_query.synonym_mapper import SynonymExpander, load_custom_synonyms
from financial_query.validator import RecordValidator

logger = get_logger("pipeline")


class FinancialQueryPipeline:
    """Orchestrates question answering over one project's records.

    Parameters
    ----------
    config:
        All tuneable knobs.  Defaults match the shipped vocabulary.
    extra_synonyms:
        Additional synonym mappings to merge into the built-in table.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        extra_synonyms: Optional[Dict[str, str]] = None,
    ) -> None:
        self._config = config or PipelineConfig()

        # Bootstrap logging before anything else
        configure_logging(level=self._config.log_level)

        merged: Dict[str, str] = {}
        if self._config.custom_synonym_path:
            merged.update(load_custom_synonyms(self._config.custom_synonym_path))
        if extra_synonyms:
            merged.update(extra_synonyms)

        vocab = self._config.vocabulary
        self._synonyms = SynonymExpander(synonyms=vocab.synonyms, extra_synonyms=merged)
        if merged:
            vocab = vocab.with_synonyms(merged)
        self._vocab = vocab

        # Construct layers
        self._dates = DateExtractor(vocab)
        self._fuzzy = FuzzyMatcher(self._config.matching)
        self._inferrer = AttributeInferrer(vocab, self._config.matching, self._fuzzy)
        self._scorer = CandidateScorer(self._config.scoring, vocab.canonical_sheet)
        self._validator = RecordValidator(self._config.validation, vocab.general_type)
        self._category = CategoryResolver(vocab, self._dates)
        self._builder = DatasetBuilder(ValueNormalizer(), vocab.general_type)

        logger.info(
            "Pipeline initialised — vocabulary=%s, synonyms=%d, top_n=%d, strict=%s",
            vocab.version,
            self._synonyms.size,
            self._config.scoring.top_n,
            self._config.strict_mode,
        )

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #

    def answer(
        self,
        dataset: Dataset,
        question: str,
        default_month: Optional[str] = None,
    ) -> QueryAnswer:
        """Answer one free-text question against *dataset*.

        Never raises for the question text itself; an unanswerable question
        yields a ``QueryAnswer`` whose ``status`` says why.

        Raises
        ------
        RuntimeError
            In strict mode, when validation dropped any record.
        """
        dataset = self._prepare(dataset)
        if dataset.is_empty:
            logger.warning("No records for project %r", dataset.project)
            return QueryAnswer(text=EMPTY_DATASET_MESSAGE, status=STATUS_EMPTY_DATASET)

        # --- Step 1: Expand shorthand ---------------------------------
        normalized = self._synonyms.expand(question)
        tokens = tokenize(normalized)
        logger.info("QUESTION: %r → %r", question, normalized)

        # --- Step 2: Date --------------------------------------------
        parsed_date = self._dates.extract(normalized, default_month)

        # --- Step 3: Monthly category questions -----------------------
        breakdown = self._category.breakdown(dataset, normalized, default_month)
        if breakdown is not None:
            candidates = self._scorer.rank(dataset, tokens, parsed_date=parsed_date)
            return QueryAnswer(
                text=format_category(breakdown),
                candidates=candidates,
                parsed_date=parsed_date,
                category=breakdown,
            )

        # --- Step 4: Attributes --------------------------------------
        inferred = self._inferrer.infer(dataset, tokens, normalized, parsed_date)

        # --- Step 5: Filter with relaxation ---------------------------
        result = resolve(
            dataset,
            sheet=inferred.sheet,
            month=parsed_date.month,
            year=parsed_date.year,
            financial_type=inferred.financial_type,
            data_type=inferred.data_type,
        )
        if result.is_empty:
            return QueryAnswer(
                text=format_no_match(result.attempted),
                status=STATUS_NO_MATCH,
                parsed_date=parsed_date,
                inferred=inferred,
                filters=result,
            )

        # --- Step 6: Total and candidates -----------------------------
        total = sum_values(result.records)
        candidates = self._scorer.rank(
            dataset,
            tokens,
            sheet=inferred.sheet,
            financial_type=inferred.financial_type,
            data_type=inferred.data_type,
            parsed_date=parsed_date,
        )
        logger.info(
            "ANSWER: %d record(s), total=%s, candidates=%d",
            len(result.records),
            total,
            len(candidates),
        )
        return QueryAnswer(
            text=format_answer(result, total, candidates),
            candidates=candidates,
            total=total,
            parsed_date=parsed_date,
            inferred=inferred,
            filters=result,
        )

    def metrics(self, dataset: Dataset) -> ProjectMetrics:
        """Headline metrics of the dataset's project."""
        return compute_metrics(self._prepare(dataset), vocabulary=self._vocab)

    def load(self, path: Union[str, Path]) -> Dataset:
        """Load a flat project file (``.csv`` or ``.xlsx``)."""
        return self._builder.load(path)

    def load_and_answer(
        self,
        path: Union[str, Path],
        question: str,
        default_month: Optional[str] = None,
    ) -> QueryAnswer:
        """Load a project file and answer *question* against it."""
        return self.answer(self.load(path), question, default_month)

    def expand(self, text: str) -> str:
        """Expand *text* with this pipeline's synonym table."""
        return self._synonyms.expand(text)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _prepare(self, dataset: Dataset) -> Dataset:
        """Validated records of the dataset's own project."""
        report = self._validator.validate(dataset.records)
        if report.errors:
            logger.warning(
                "Validation dropped %d record(s), %d warning(s)",
                report.dropped,
                len(report.warnings),
            )
            if self._config.strict_mode:
                raise RuntimeError(
                    f"Strict mode: validation dropped {report.dropped} "
                    f"record(s):\n" + "\n".join(report.errors)
                )
        return Dataset.for_project(report.records, dataset.project)

    @property
    def synonym_count(self) -> int:
        return self._synonyms.size
