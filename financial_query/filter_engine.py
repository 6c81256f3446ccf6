"""
Filter & Relax Engine.

Applies the inferred filters to a dataset.  When nothing matches, filters
are dropped in a fixed order and the dataset is filtered again:

1. every supplied filter;
2. without the financial type;
3. without the financial type and the data type.

Sheet, month and year are never dropped.  The result records which filters
the returned records satisfy, so callers can show what was really applied.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from financial_query.logging_setup import get_logger
from financial_query.schema import Dataset, FilterResult, FilterSet, Record

logger = get_logger("filter_engine")


# (name, builder): each builder derives the filters to try from the request
RelaxStep = Tuple[str, Callable[[FilterSet], FilterSet]]

RELAXATION_STEPS: Tuple[RelaxStep, ...] = (
    ("all", lambda f: f),
    ("financial_type", lambda f: f.without("financial_type")),
    ("data_type", lambda f: f.without("financial_type", "data_type")),
)


def apply_filters(dataset: Dataset, filters: FilterSet) -> Tuple[Record, ...]:
    """Records of *dataset* satisfying every filter in *filters*, in order."""
    return tuple(r for r in dataset if filters.matches(r))


def resolve(
    dataset: Dataset,
    sheet: Optional[str] = None,
    month: Optional[str] = None,
    year: Optional[str] = None,
    financial_type: Optional[str] = None,
    data_type: Optional[str] = None,
    steps: Tuple[RelaxStep, ...] = RELAXATION_STEPS,
) -> FilterResult:
    """Filter *dataset*, relaxing the filters until something matches."""
    requested = FilterSet(
        sheet=sheet or None,
        month=month or None,
        year=year or None,
        financial_type=financial_type or None,
        data_type=data_type or None,
    )

    relaxed: List[str] = []
    filters: Optional[FilterSet] = None
    for name, build in steps:
        candidate = build(requested)
        if candidate == filters:
            continue
        filters = candidate
        if name != "all":
            relaxed.append(name)
            logger.info("No records matched; relaxing %s filter", name)
        records = apply_filters(dataset, filters)
        if records:
            logger.info(
                "Filters %s matched %d record(s)", filters.active(), len(records)
            )
            return FilterResult(
                records=records,
                applied=filters,
                attempted=requested,
                relaxed=tuple(relaxed),
            )

    logger.warning("No records matched filters %s", requested.active())
    return FilterResult(
        records=(),
        applied=filters or requested,
        attempted=requested,
        relaxed=tuple(relaxed),
    )
