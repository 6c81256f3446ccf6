"""
Text and Value Normalization Layer.

Turns raw cells and question text into clean, comparable values:

* Question text is lower-cased and split on whitespace (no other NLP).
* Cell text is stripped of surrounding whitespace and stray quotes.
* Numeric values are parsed from strings with commas, currency symbols,
  parenthetical negatives and trailing percent signs.

``to_number`` is the single conversion point used by every aggregation;
it never returns NaN or infinity.
"""

from __future__ import annotations

import math
import re
from typing import Any, List, Optional, Tuple

from financial_query.logging_setup import get_logger

logger = get_logger("normalizer")


def tokenize(text: str) -> List[str]:
    """Lower-case *text* and split it on whitespace."""
    if not text:
        return []
    return text.lower().split()


class ValueNormalizer:
    """Stateless cell normaliser.  All methods are pure functions."""

    # Currency symbols / prefixes to strip from values
    _CURRENCY_RE = re.compile(r"[₹$€£¥]")

    # Parenthetical negative: ``(1234)`` → ``-1234``
    _PAREN_NEG_RE = re.compile(r"^\((.+)\)$")

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def normalize_cell(self, raw: Any) -> str:
        """Return a cell as trimmed text with double quotes removed."""
        if raw is None:
            return ""
        if isinstance(raw, float) and raw.is_integer():
            raw = int(raw)
        return str(raw).strip().replace('"', "")

    def normalize_value(self, raw: Any) -> Tuple[Optional[float], list[str]]:
        """Attempt to parse a numeric financial value.

        Handles:
        * String numbers with commas: ``"1,234,567"``
        * Currency prefixes: ``"$12000"``
        * Parenthetical negatives: ``"(5000)"``
        * Already-numeric inputs (int / float)

        Returns
        -------
        tuple[float | None, list[str]]
            (parsed_value, list_of_warnings).  ``None`` if parsing fails.
        """
        warnings: list[str] = []

        if raw is None:
            warnings.append("Value is None")
            return None, warnings

        if isinstance(raw, bool):
            warnings.append("Unexpected value type: bool")
            return None, warnings

        # Already numeric
        if isinstance(raw, (int, float)):
            if math.isnan(raw) or math.isinf(raw):
                warnings.append(f"Non-finite value: {raw!r}")
                return None, warnings
            return float(raw), warnings

        if not isinstance(raw, str):
            warnings.append(f"Unexpected value type: {type(raw).__name__}")
            return None, warnings

        text = raw.strip()
        if not text:
            warnings.append("Value is empty string")
            return None, warnings

        # Currency symbols
        text = self._CURRENCY_RE.sub("", text).strip()

        # Parenthetical negative
        m = self._PAREN_NEG_RE.match(text)
        if m:
            text = "-" + m.group(1)

        text = text.replace(",", "")

        # Percent sign
        if text.endswith("%"):
            text = text[:-1].strip()
            warnings.append("Percent symbol stripped; raw value treated as number")

        try:
            value = float(text)
        except ValueError:
            warnings.append(f"Cannot parse numeric value from: {raw!r}")
            return None, warnings

        if math.isnan(value) or math.isinf(value):
            warnings.append(f"Non-finite value: {raw!r}")
            return None, warnings

        logger.debug("normalize_value: %r → %s (warnings=%s)", raw, value, warnings)
        return value, warnings


_DEFAULT_NORMALIZER = ValueNormalizer()


def to_number(value: Any) -> float:
    """Numeric view of a record value; anything unparseable counts as 0.0."""
    parsed, _ = _DEFAULT_NORMALIZER.normalize_value(value)
    return parsed if parsed is not None else 0.0
