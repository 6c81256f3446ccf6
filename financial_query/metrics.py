"""
Project Metrics Aggregator.

Computes the headline figures shown for every project, straight from the
records and without any question interpretation:

* the four gross-profit figures on the canonical sheet (business plan,
  projection, WIP, cash flow); and
* the schedule fields stored as text on the "General" rows.

WIP gross profit is the gross-profit line of the financial type containing
"audit report".
"""

from __future__ import annotations

from typing import Iterable, Optional

from financial_query.logging_setup import get_logger
from financial_query.normalizer import to_number
from financial_query.schema import Dataset, ProjectMetrics, Record
from financial_query.vocabulary import VocabularyConfig

logger = get_logger("metrics")

GROSS_PROFIT_ITEM_CODE = "3"
GROSS_PROFIT_LABEL = "gross profit"

# metric field → text its financial type must contain
GP_FINANCIAL_TYPES = (
    ("business_plan_gp", "business plan"),
    ("projected_gp", "projection"),
    ("wip_gp", "audit report"),
    ("cash_flow", "cash flow"),
)

# metric field → data-type label of the "General" row holding it
INFO_FIELDS = (
    ("start_date", "Start Date"),
    ("complete_date", "Complete Date"),
    ("target_complete_date", "Target Complete Date"),
    ("time_consumed_pct", "Time Consumed (%)"),
    ("target_completed_pct", "Target Completed (%)"),
)

NOT_AVAILABLE = "N/A"


def is_gross_profit_line(record: Record) -> bool:
    """Item code ``"3"`` with a data type mentioning gross profit."""
    return (
        record.item_code == GROSS_PROFIT_ITEM_CODE
        and GROSS_PROFIT_LABEL in record.data_type.lower()
    )


def sum_values(records: Iterable[Record]) -> float:
    """Sum of the numeric values; text values (dates, percentages) count as 0."""
    return sum(to_number(r.value) for r in records if not isinstance(r.value, str))


def compute_metrics(
    dataset: Dataset,
    project: Optional[str] = None,
    vocabulary: Optional[VocabularyConfig] = None,
) -> ProjectMetrics:
    """Aggregate the headline metrics of *project* (defaults to the dataset's).

    Missing lines count as 0 and missing info fields as ``"N/A"``; this
    never raises for a well-formed dataset.
    """
    vocab = vocabulary or VocabularyConfig()
    project = project if project is not None else dataset.project
    records = [r for r in dataset if r.project == project]
    if not records:
        logger.warning("No records for project %r; metrics default to zero", project)
        return ProjectMetrics()

    gp_lines = [
        r for r in records
        if r.sheet == vocab.canonical_sheet and is_gross_profit_line(r)
    ]
    money = {
        name: sum_values(r for r in gp_lines if needle in r.financial_type.lower())
        for name, needle in GP_FINANCIAL_TYPES
    }

    general = [r for r in records if r.financial_type == vocab.general_type]
    info = {name: _info_value(general, label) for name, label in INFO_FIELDS}

    metrics = ProjectMetrics(**money, **info)
    logger.info(
        "Metrics for %r: BP GP=%s, projected GP=%s, WIP GP=%s, cash flow=%s",
        project,
        metrics.business_plan_gp,
        metrics.projected_gp,
        metrics.wip_gp,
        metrics.cash_flow,
    )
    return metrics


def _info_value(general: Iterable[Record], label: str) -> str:
    for record in general:
        if record.data_type == label:
            value = str(record.value).strip()
            return value if value and value != "Nil" else NOT_AVAILABLE
    return NOT_AVAILABLE
