"""
Record Validation Layer.

Checks records *before* the engine reads them.  A record that would break a
query is reported as an error and left out, as if the source had never
contained it; oddities that still allow answering are warnings.

Checks performed
----------------
1. **Shape** — must be a ``Record`` whose text attributes are strings.
2. **Value** — numeric or text; numeric values must be finite.
3. **Month** — "1".."12" (error or warning, see ``error_on_bad_month``).
4. **Plausibility** — very large values, text on non-"General" lines,
   empty item codes.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Tuple

from financial_query.config import ValidationConfig
from financial_query.logging_setup import get_logger
from financial_query.schema import Record
from financial_query.vocabulary import GENERAL_TYPE

logger = get_logger("validator")

_TEXT_FIELDS = ("year", "month", "sheet", "financial_type", "data_type", "item_code", "project")


class ValidationReport:
    """Accumulates errors, warnings and the records that passed."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.records: list[Record] = []

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def dropped(self) -> int:
        return len(self.errors)

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)
        logger.warning("Record dropped: %s", msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)
        logger.debug("Record warning: %s", msg)


class RecordValidator:
    """Validates a sequence of records.

    Parameters
    ----------
    config:
        Validation thresholds and behaviour flags.
    general_type:
        Financial type whose records legitimately carry text values.
    """

    def __init__(
        self,
        config: Optional[ValidationConfig] = None,
        general_type: str = GENERAL_TYPE,
    ) -> None:
        self._config = config or ValidationConfig()
        self._general_type = general_type

    def validate(self, records: Iterable[Any]) -> ValidationReport:
        """Run all checks and return a ``ValidationReport``."""
        report = ValidationReport()
        for index, record in enumerate(records):
            if self._check(index, record, report):
                report.records.append(record)
        return report

    def filter(self, records: Iterable[Any]) -> Tuple[Record, ...]:
        """Only the records that pass validation."""
        return tuple(self.validate(records).records)

    # ------------------------------------------------------------------ #
    # Individual checks
    # ------------------------------------------------------------------ #

    def _check(self, index: int, record: Any, report: ValidationReport) -> bool:
        if not isinstance(record, Record):
            report.add_error(f"row {index}: expected Record, got {type(record).__name__}")
            return False

        bad = [name for name in _TEXT_FIELDS if not isinstance(getattr(record, name), str)]
        if bad:
            report.add_error(f"row {index}: non-text field(s) {', '.join(bad)}")
            return False

        return (
            self._check_value(index, record, report)
            and self._check_month(index, record, report)
        )

    def _check_value(self, index: int, record: Record, report: ValidationReport) -> bool:
        value = record.value
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            report.add_error(
                f"row {index}: unsupported value type {type(value).__name__}"
            )
            return False

        if isinstance(value, str):
            if record.financial_type != self._general_type and value.strip():
                report.add_warning(
                    f"row {index}: text value {value!r} on "
                    f"'{record.financial_type}' line counts as 0"
                )
            return True

        if math.isnan(value) or math.isinf(value):
            report.add_error(f"row {index}: non-finite value {value}")
            return False

        if abs(value) > self._config.max_absolute_value:
            report.add_warning(
                f"row {index}: value {value} exceeds max_absolute_value "
                f"({self._config.max_absolute_value}). Possible unit error?"
            )
        if not record.item_code:
            report.add_warning(f"row {index}: empty item code")
        return True

    def _check_month(self, index: int, record: Record, report: ValidationReport) -> bool:
        month = record.month
        if month.isdecimal() and str(int(month)) == month and 1 <= int(month) <= 12:
            return True

        msg = f"row {index}: month {month!r} is not one of '1'..'12'"
        if self._config.error_on_bad_month:
            report.add_error(msg)
            return False
        report.add_warning(msg)
        return True


def validate_records(records: Iterable[Any]) -> List[Record]:
    """Records passing the default validation."""
    return RecordValidator().validate(records).records
