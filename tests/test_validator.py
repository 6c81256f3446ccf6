"""
Unit tests for the RecordValidator.
"""

from __future__ import annotations

import math

import pytest

from financial_query.config import ValidationConfig
from financial_query.schema import Record
from financial_query.validator import RecordValidator, validate_records


def _make_record(**overrides) -> Record:
    fields = dict(
        year="2025",
        month="3",
        sheet="Financial Status",
        financial_type="Projection as at",
        data_type="Gross Profit",
        item_code="3",
        value=250.0,
        project="P",
    )
    fields.update(overrides)
    return Record(**fields)


@pytest.fixture
def validator() -> RecordValidator:
    return RecordValidator(config=ValidationConfig())


@pytest.fixture
def strict_validator() -> RecordValidator:
    return RecordValidator(config=ValidationConfig(error_on_bad_month=True))


# ======================================================================
# Clean input
# ======================================================================

class TestClean:
    def test_valid_records_pass(self, validator: RecordValidator) -> None:
        records = [_make_record(), _make_record(financial_type="General", value="Nil")]
        report = validator.validate(records)
        assert report.is_valid
        assert report.warnings == []
        assert report.records == records

    def test_module_level_function(self) -> None:
        assert validate_records([_make_record()]) == [_make_record()]


# ======================================================================
# Dropped records
# ======================================================================

class TestErrors:
    def test_non_record_dropped(self, validator: RecordValidator) -> None:
        report = validator.validate([{"Year": "2025"}, _make_record()])
        assert report.dropped == 1
        assert len(report.records) == 1
        assert "expected Record" in report.errors[0]

    def test_non_text_field_dropped(self, validator: RecordValidator) -> None:
        report = validator.validate([_make_record(year=2025)])
        assert not report.is_valid
        assert "year" in report.errors[0]

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_value_dropped(self, validator: RecordValidator, value: float) -> None:
        report = validator.validate([_make_record(value=value)])
        assert report.records == []
        assert "non-finite" in report.errors[0]

    @pytest.mark.parametrize("value", [True, None, [1, 2]])
    def test_unsupported_value_type(self, validator: RecordValidator, value) -> None:
        assert validator.filter([_make_record(value=value)]) == ()

    def test_bad_month_dropped_when_configured(self, strict_validator: RecordValidator) -> None:
        report = strict_validator.validate([_make_record(month="13")])
        assert report.dropped == 1


# ======================================================================
# Warnings
# ======================================================================

class TestWarnings:
    def test_text_on_financial_line(self, validator: RecordValidator) -> None:
        report = validator.validate([_make_record(value="tbc")])
        assert report.is_valid
        assert len(report.records) == 1
        assert "counts as 0" in report.warnings[0]

    @pytest.mark.parametrize("month", ["13", "0", "03", "March"])
    def test_bad_month_warning(self, validator: RecordValidator, month: str) -> None:
        report = validator.validate([_make_record(month=month)])
        assert report.is_valid
        assert len(report.warnings) == 1

    def test_large_value(self) -> None:
        validator = RecordValidator(ValidationConfig(max_absolute_value=1000))
        report = validator.validate([_make_record(value=5000.0)])
        assert report.is_valid
        assert "max_absolute_value" in report.warnings[0]

    def test_empty_item_code(self, validator: RecordValidator) -> None:
        report = validator.validate([_make_record(item_code="")])
        assert "empty item code" in report.warnings[0]
