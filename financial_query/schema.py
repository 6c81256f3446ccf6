"""
Data models for the query engine.

Defines the record shape loaded from project files and the typed results
carried through the pipeline.  Records are frozen; every stage of the engine
produces new values instead of mutating its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union


# A record's value is either numeric (financial line items) or text
# ("General" rows: dates, percentages).  Conversion to a number happens only
# at aggregation time, see ``normalizer.to_number``; text values never enter
# a sum.
RecordValue = Union[float, str]


def item_code_matches(code: str, prefix: str) -> bool:
    """Return True if *code* is *prefix* or a descendant of it.

    ``"2.3"`` matches ``"2.3"`` and ``"2.3.1"`` but not ``"2.30"``.
    """
    return code == prefix or code.startswith(prefix + ".")


# ---------------------------------------------------------------------------
# Records and datasets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Record:
    """One financial line item."""

    year: str
    month: str
    sheet: str
    financial_type: str
    data_type: str
    item_code: str
    value: RecordValue
    project: str = ""

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.value, (int, float)) and not isinstance(self.value, bool)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Year": self.year,
            "Month": self.month,
            "Sheet_Name": self.sheet,
            "Financial_Type": self.financial_type,
            "Data_Type": self.data_type,
            "Item_Code": self.item_code,
            "Value": self.value,
            "_project": self.project,
        }


# Record attributes that can be listed with ``Dataset.distinct``
RECORD_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(Record))


@dataclass(frozen=True)
class Dataset:
    """All records for one project in one reporting period."""

    project: str
    records: Tuple[Record, ...] = ()

    @classmethod
    def for_project(cls, records: Iterable[Record], project: str) -> "Dataset":
        """Keep only the records labelled with *project*, in order."""
        return cls(
            project=project,
            records=tuple(r for r in records if r.project == project),
        )

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def distinct(self, field_name: str) -> List[str]:
        """Distinct non-empty values of a record attribute, first-seen order."""
        if field_name not in RECORD_FIELDS:
            raise ValueError(
                f"Unknown record field {field_name!r}. "
                f"Must be one of {', '.join(RECORD_FIELDS)}."
            )
        seen: dict[str, None] = {}
        for record in self.records:
            value = getattr(record, field_name)
            if value:
                seen.setdefault(str(value), None)
        return list(seen)


@dataclass(frozen=True)
class ProjectInfo:
    """Project identity parsed from a flat-file name."""

    code: Optional[str]
    name: str
    year: str = ""
    month: str = ""
    filename: str = ""
    path: Optional[str] = None

    @property
    def label(self) -> str:
        """Dataset key, ``"<code> - <name>"``."""
        return f"{self.code or ''} - {self.name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "year": self.year,
            "month": self.month,
            "filename": self.filename,
            "path": self.path,
        }


# ---------------------------------------------------------------------------
# Query interpretation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParsedDate:
    """Month / year recovered from a question.

    ``month_from_text`` is False when ``month`` is the caller's default.
    """

    month: Optional[str] = None
    year: Optional[str] = None
    month_from_text: bool = False

    @property
    def has_user_date(self) -> bool:
        """True when the question itself named a month or a year."""
        return self.month_from_text or self.year is not None


@dataclass(frozen=True)
class InferredAttributes:
    """Sheet / financial type / data type guessed from a question."""

    sheet: Optional[str] = None
    financial_type: Optional[str] = None
    data_type: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheet": self.sheet,
            "financial_type": self.financial_type,
            "data_type": self.data_type,
        }


@dataclass(frozen=True)
class FilterSet:
    """Equality filters applied together (logical AND).  ``None`` = unused."""

    sheet: Optional[str] = None
    month: Optional[str] = None
    year: Optional[str] = None
    financial_type: Optional[str] = None
    data_type: Optional[str] = None

    # Display labels, in display order
    LABELS = (
        ("sheet", "Sheet"),
        ("month", "Month"),
        ("year", "Year"),
        ("financial_type", "Financial Type"),
        ("data_type", "Data Type"),
    )

    def matches(self, record: Record) -> bool:
        return (
            (self.sheet is None or record.sheet == self.sheet)
            and (self.month is None or record.month == self.month)
            and (self.year is None or record.year == self.year)
            and (self.financial_type is None or record.financial_type == self.financial_type)
            and (self.data_type is None or record.data_type == self.data_type)
        )

    def without(self, *names: str) -> "FilterSet":
        """Return a copy with the named filters removed."""
        return replace(self, **{name: None for name in names})

    def active(self) -> List[Tuple[str, str]]:
        """``[(label, value), ...]`` for every filter in use."""
        return [
            (label, getattr(self, name))
            for name, label in self.LABELS
            if getattr(self, name) is not None
        ]

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name, _ in self.LABELS}


@dataclass(frozen=True)
class FilterResult:
    """Outcome of filtering with progressive relaxation.

    ``applied`` lists the filters the returned records actually satisfy;
    ``attempted`` lists every filter that was requested.
    """

    records: Tuple[Record, ...]
    applied: FilterSet
    attempted: FilterSet
    relaxed: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.records

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_count": len(self.records),
            "applied": self.applied.to_dict(),
            "attempted": self.attempted.to_dict(),
            "relaxed": list(self.relaxed),
        }


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Candidate:
    """A scored, ranked record surfaced as a possible answer."""

    id: int
    value: RecordValue
    score: int
    sheet: str
    financial_type: str
    data_type: str
    item_code: str
    month: str
    year: str
    matched_keywords: Tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "value": self.value,
            "score": self.score,
            "sheet": self.sheet,
            "financial_type": self.financial_type,
            "data_type": self.data_type,
            "item_code": self.item_code,
            "month": self.month,
            "year": self.year,
            "matched_keywords": list(self.matched_keywords),
        }


@dataclass(frozen=True)
class ProjectMetrics:
    """Headline figures for one project, independent of any question."""

    business_plan_gp: float = 0.0
    projected_gp: float = 0.0
    wip_gp: float = 0.0
    cash_flow: float = 0.0
    start_date: str = "N/A"
    complete_date: str = "N/A"
    target_complete_date: str = "N/A"
    time_consumed_pct: str = "N/A"
    target_completed_pct: str = "N/A"

    def to_dict(self) -> dict[str, Any]:
        return {
            "Business Plan GP": self.business_plan_gp,
            "Projected GP": self.projected_gp,
            "WIP GP": self.wip_gp,
            "Cash Flow": self.cash_flow,
            "Start Date": self.start_date,
            "Complete Date": self.complete_date,
            "Target Complete Date": self.target_complete_date,
            "Time Consumed (%)": self.time_consumed_pct,
            "Target Completed (%)": self.target_completed_pct,
        }


@dataclass(frozen=True)
class CategoryBreakdown:
    """Monthly totals of one cost category across the cost sheets."""

    category: str
    item_code: str
    month: str
    totals: Tuple[Tuple[str, float], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "item_code": self.item_code,
            "month": self.month,
            "totals": dict(self.totals),
        }


STATUS_OK = "ok"
STATUS_EMPTY_DATASET = "empty_dataset"
STATUS_NO_MATCH = "no_match"


@dataclass
class QueryAnswer:
    """Aggregate result of answering one question."""

    text: str
    candidates: List[Candidate] = field(default_factory=list)
    status: str = STATUS_OK
    total: Optional[float] = None
    parsed_date: Optional[ParsedDate] = None
    inferred: Optional[InferredAttributes] = None
    filters: Optional[FilterResult] = None
    category: Optional[CategoryBreakdown] = None

    @property
    def success(self) -> bool:
        return self.status == STATUS_OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "response": self.text,
            "total": self.total,
            "candidates": [c.to_dict() for c in self.candidates],
            "inferred": self.inferred.to_dict() if self.inferred else None,
            "filters": self.filters.to_dict() if self.filters else None,
            "category": self.category.to_dict() if self.category else None,
        }
