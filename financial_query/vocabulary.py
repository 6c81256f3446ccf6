"""
Static vocabulary for question resolution.

Every table here is read-only configuration loaded once at import time.
The tables are wrapped in ``MappingProxyType`` so nothing can mutate them
at runtime; a test that needs a different vocabulary builds its own
``VocabularyConfig`` instead of patching module globals.

Bump ``VOCABULARY_VERSION`` whenever an entry changes meaning.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Tuple


VOCABULARY_VERSION = "2025.1"

CANONICAL_SHEET = "Financial Status"
GENERAL_TYPE = "General"


# ---------------------------------------------------------------------------
# Question synonyms
# ---------------------------------------------------------------------------
# Convention: key = single lowercase word as typed by users, value = the
# canonical phrase it expands to.  No word inside a phrase may itself be a
# key unless that key expands to the very same phrase (keeps ``expand``
# idempotent).

SYNONYMS: Mapping[str, str] = MappingProxyType({
    # --- Profit lines ---
    "gp": "gross profit",
    "np": "net profit",

    # --- Financial types ---
    "wip": "audit report",
    "projected": "projection",
    "cashflow": "cash flow",
    "cash": "cash flow",

    # --- Cost categories ---
    "subcon": "subcontractor",
    "sub": "subcontractor",
    "subcontractor": "subcontractor",
    "rebar": "reinforcement",
    "staff": "manpower (mgt. & supervision)",
    "labour": "manpower (labour)",
    "labor": "manpower (labour)",
    "lab": "manpower (labour)",
    "prelim": "preliminaries",
    "preliminary": "preliminaries",
    "material": "materials",
    "plant": "plant and machinery",
    "machinery": "plant and machinery",
})


# ---------------------------------------------------------------------------
# Sheet keywords
# ---------------------------------------------------------------------------
# Checked in insertion order after literal sheet-name containment fails.

SHEET_KEYWORDS: Mapping[str, str] = MappingProxyType({
    "cashflow": "Cash Flow",
    "cash flow": "Cash Flow",
    "projection": "Projection",
    "committed": "Committed Cost",
    "accrual": "Accrual",
    "financial status": "Financial Status",
    "financial": "Financial Status",
})


# ---------------------------------------------------------------------------
# Data-type acronyms
# ---------------------------------------------------------------------------
# acronym → phrases searched (in order) inside the dataset's data types.

DATA_TYPE_ACRONYMS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "np": ("net profit", "acc. net profit"),
    "gp": ("gross profit", "acc. gross profit"),
    "wip": ("work in progress",),
    "cf": ("cash flow",),
})


# ---------------------------------------------------------------------------
# Cost-category item codes
# ---------------------------------------------------------------------------

# Matched against the synonym-expanded question, so keys are canonical
# phrases: "plant", "labour", "staff" and "subcon" arrive here already
# rewritten.  Item 2.4 has no keyword of its own for that reason.
CATEGORY_CODES: Mapping[str, str] = MappingProxyType({
    "plant and machinery": "2.3",
    "preliminaries": "2.1",
    "materials": "2.2",
    "manpower (labour) for works": "2.5",
    "manpower (labour)": "2.5",
    "manpower": "2.5",
    "subcontractor": "2.5",
    "manpower (mgt. & supervision)": "2.6",
    "admin": "2.7",
    "administration": "2.7",
    "insurance": "2.8",
    "bond": "2.9",
    "others": "2.10",
    "other": "2.10",
    "contingency": "2.11",
})

# Sheets summed by the monthly category breakdown, in display order.
CATEGORY_SHEETS: Tuple[str, ...] = (
    "Projection",
    "Committed Cost",
    "Accrual",
    "Cash Flow",
)


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

MONTH_NAMES: Tuple[str, ...] = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

# word → month number as string ("1".."12"); full names and 3-letter forms
MONTH_LOOKUP: Mapping[str, str] = MappingProxyType({
    **{name: str(i + 1) for i, name in enumerate(MONTH_NAMES)},
    **{name[:3]: str(i + 1) for i, name in enumerate(MONTH_NAMES)},
})


# ---------------------------------------------------------------------------
# Project information rows
# ---------------------------------------------------------------------------

PROJECT_INFO_LABELS: Tuple[str, ...] = (
    "Start Date",
    "Complete Date",
    "Target Complete Date",
    "Time Consumed (%)",
    "Target Completed (%)",
)


@dataclass(frozen=True)
class VocabularyConfig:
    """Bundle of every static table the engine consults."""

    version: str = VOCABULARY_VERSION
    synonyms: Mapping[str, str] = field(default_factory=lambda: SYNONYMS)
    sheet_keywords: Mapping[str, str] = field(default_factory=lambda: SHEET_KEYWORDS)
    data_type_acronyms: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: DATA_TYPE_ACRONYMS
    )
    category_codes: Mapping[str, str] = field(default_factory=lambda: CATEGORY_CODES)
    category_sheets: Tuple[str, ...] = CATEGORY_SHEETS
    month_lookup: Mapping[str, str] = field(default_factory=lambda: MONTH_LOOKUP)
    canonical_sheet: str = CANONICAL_SHEET
    general_type: str = GENERAL_TYPE

    # Inclusive bounds for 4-digit and 2-digit year tokens
    year_range: Tuple[int, int] = (2020, 2049)
    two_digit_year_range: Tuple[int, int] = (20, 30)

    def with_synonyms(self, extra: Mapping[str, str]) -> "VocabularyConfig":
        """Return a copy whose synonym table also contains *extra*."""
        merged = dict(self.synonyms)
        for word, phrase in extra.items():
            merged[word.strip().lower()] = phrase.strip().lower()
        return replace(
            self,
            version=f"{self.version}+custom",
            synonyms=MappingProxyType(merged),
        )
