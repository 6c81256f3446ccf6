"""
Answer formatting.

Renders query outcomes as markdown-flavoured text.  Presentation belongs to
the caller; these helpers only give every caller the same default wording.
"""

from __future__ import annotations

import math
from typing import Dict, List, Sequence

from financial_query.normalizer import to_number
from financial_query.schema import (
    Candidate,
    CategoryBreakdown,
    FilterResult,
    FilterSet,
    Record,
    RecordValue,
)

EMPTY_DATASET_MESSAGE = "No data found for this project."
NO_MATCH_MESSAGE = "No data found matching your query."
UNITS = "('000)"


def format_currency(value: float) -> str:
    """Whole dollars with thousands separators; halves round up."""
    return f"${math.floor(value + 0.5):,}"


def format_value(value: RecordValue) -> str:
    """Currency for numeric values, verbatim text otherwise."""
    if isinstance(value, str):
        return value
    return format_currency(to_number(value))


def group_by_item_code(records: Sequence[Record]) -> Dict[str, float]:
    """Subtotal per item code, in first-seen order; text values add nothing."""
    groups: Dict[str, float] = {}
    for record in records:
        key = record.item_code or "Unknown"
        amount = 0.0 if isinstance(record.value, str) else to_number(record.value)
        groups[key] = groups.get(key, 0.0) + amount
    return groups


def format_candidates(candidates: Sequence[Candidate]) -> List[str]:
    lines = []
    for c in candidates:
        matches = (
            f" [Matched: {', '.join(c.matched_keywords)}]" if c.matched_keywords else ""
        )
        lines.append(
            f"[{c.id}] {c.month}/{c.year}/{c.sheet}/{c.financial_type}/"
            f"{c.data_type}/{c.item_code}: {format_value(c.value)} "
            f"[Score: {c.score}]{matches}"
        )
    return lines


def format_answer(
    result: FilterResult,
    total: float,
    candidates: Sequence[Candidate],
) -> str:
    """The "Query Results" block for a question that matched records."""
    applied = result.applied
    lines = ["## Query Results", "", "**Filters:**"]
    if applied.sheet:
        lines.append(f"• Sheet: {applied.sheet}")
    if applied.financial_type:
        lines.append(f"• Financial Type: {applied.financial_type}")
    lines.append(f"• Month: {applied.month or 'All'}")
    lines.append(f"• Year: {applied.year or 'All'}")
    lines.append(f"• Data Type: {applied.data_type or 'All'}")
    lines.append("• Item Code: all")
    if result.relaxed:
        dropped = ", ".join(
            label for name, label in FilterSet.LABELS if name in result.relaxed
        )
        lines.append(f"• Relaxed: {dropped}")
    lines.append("")

    lines.append(f"**Total: {format_currency(total)}** {UNITS}")
    lines.append("")
    lines.append("**By Item Code:**")
    for code, subtotal in group_by_item_code(result.records).items():
        lines.append(f"• Item {code}: {format_currency(subtotal)}")

    if candidates:
        lines.append("")
        lines.append("**Available Records (click to select):**")
        lines.extend(format_candidates(candidates))

    return "\n".join(lines) + "\n"


def format_no_match(attempted: FilterSet) -> str:
    """Diagnostic listing every filter that was tried."""
    lines = [NO_MATCH_MESSAGE, "", "Filters attempted:"]
    lines.extend(f"- {label}: {value}" for label, value in attempted.active())
    return "\n".join(lines)


def format_category(breakdown: CategoryBreakdown) -> str:
    title = breakdown.category[:1].upper() + breakdown.category[1:]
    lines = [f"## Monthly {title} (month {breakdown.month or 'n/a'}) {UNITS}", ""]
    lines.extend(
        f"- **{sheet}:** {format_currency(value)}" for sheet, value in breakdown.totals
    )
    return "\n".join(lines) + "\n"
