"""
Dataset Builder.

Reads flat project exports into ``Record`` objects and groups them into a
``Dataset`` keyed by project label.

Flat layout (one line item per row, value in the last column)::

    Year, Month, Sheet_Name, Financial_Type, Item_Code, Data_Type, Value

Supported sources: CSV file or CSV text, ``.xlsx`` workbook (first sheet),
and iterables of dicts keyed by the column names.  Project files are named
``"<code> <name>[ Financial Report...]_flat.csv"`` and stored under
``<root>/<year>/<month>/``.
"""

from __future__ import annotations

import csv
import re
from io import StringIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import openpyxl

from financial_query.logging_setup import get_logger
from financial_query.normalizer import ValueNormalizer
from financial_query.schema import Dataset, ProjectInfo, Record
from financial_query.vocabulary import GENERAL_TYPE

logger = get_logger("dataset_builder")

COLUMNS: Tuple[str, ...] = (
    "Year",
    "Month",
    "Sheet_Name",
    "Financial_Type",
    "Item_Code",
    "Data_Type",
    "Value",
)

FLAT_SUFFIX = "_flat.csv"
EXCEL_SUFFIX = "_flat.xlsx"

_HEADER_MARKERS = {"year", "sheet_name"}
_CODE_RE = re.compile(r"^(\d+)")
_REPORT_SUFFIX_RE = re.compile(r"\s*Financial\s*Report.*", re.IGNORECASE)


def parse_project_filename(filename: str) -> ProjectInfo:
    """Split ``"1234 Harbour Tower Financial Report_flat.csv"`` into code / name.

    Filenames without a leading digit run get ``code=None``.
    """
    base = Path(filename).name
    for suffix in (FLAT_SUFFIX, EXCEL_SUFFIX):
        if base.endswith(suffix):
            base = base[: -len(suffix)]
            break

    m = _CODE_RE.match(base)
    if not m:
        return ProjectInfo(code=None, name=base, filename=Path(filename).name)

    code = m.group(1)
    name = _REPORT_SUFFIX_RE.sub("", base[len(code):].strip()).strip()
    return ProjectInfo(code=code, name=name, filename=Path(filename).name)


class DatasetBuilder:
    """Builds ``Record`` sequences and ``Dataset`` objects from flat exports.

    Parameters
    ----------
    normalizer:
        Parses numeric cells; a default ``ValueNormalizer`` when omitted.
    general_type:
        Financial type whose values are kept as text (dates, percentages).
    """

    def __init__(
        self,
        normalizer: Optional[ValueNormalizer] = None,
        general_type: str = GENERAL_TYPE,
    ) -> None:
        self._normalizer = normalizer or ValueNormalizer()
        self._general_type = general_type

    # ------------------------------------------------------------------ #
    # Row conversion
    # ------------------------------------------------------------------ #

    def build_record(self, cells: Sequence[Any], project: str = "") -> Record:
        """Turn one positional row into a ``Record``.

        Raises
        ------
        ValueError
            If the row has fewer cells than ``COLUMNS``.
        """
        if len(cells) < len(COLUMNS):
            raise ValueError(
                f"Expected at least {len(COLUMNS)} cells, got {len(cells)}"
            )

        clean = [self._normalizer.normalize_cell(c) for c in cells]
        financial_type = clean[3]
        raw_value = cells[-1]

        value: Union[float, str]
        if financial_type == self._general_type:
            value = clean[-1]
        else:
            parsed, warnings = self._normalizer.normalize_value(raw_value)
            if parsed is None:
                if clean[-1]:
                    logger.debug("Value %r parsed as 0 (%s)", raw_value, "; ".join(warnings))
                parsed = 0.0
            value = parsed

        return Record(
            year=clean[0],
            month=clean[1],
            sheet=clean[2],
            financial_type=financial_type,
            item_code=clean[4],
            data_type=clean[5],
            value=value,
            project=project,
        )

    def build_records(
        self, rows: Iterable[Sequence[Any]], project: str = ""
    ) -> List[Record]:
        """Convert positional rows, skipping a header and short rows."""
        records: List[Record] = []
        for index, row in enumerate(rows):
            if not row or not any(str(c).strip() for c in row if c is not None):
                continue
            first = self._normalizer.normalize_cell(row[0]).lower()
            if index == 0 and first in _HEADER_MARKERS:
                continue
            try:
                records.append(self.build_record(row, project))
            except ValueError as exc:
                logger.warning("Skipping row %d: %s (%r)", index, exc, row)
        return records

    # ------------------------------------------------------------------ #
    # Input readers: each returns [Record, ...]
    # ------------------------------------------------------------------ #

    def read_csv(self, source: Union[str, Path], project: str = "") -> List[Record]:
        """Read a flat CSV file or CSV text."""
        if isinstance(source, Path) or (
            isinstance(source, str) and "\n" not in source and Path(source).exists()
        ):
            with open(Path(source), encoding="utf-8-sig", newline="") as fh:
                rows = list(csv.reader(fh))
        else:
            rows = list(csv.reader(StringIO(source)))

        records = self.build_records(rows, project)
        logger.info("Read %d record(s) for project %r from CSV", len(records), project)
        return records

    def read_excel(self, path: Union[str, Path], project: str = "") -> List[Record]:
        """Read the first worksheet of a flat ``.xlsx`` export."""
        wb = openpyxl.load_workbook(Path(path), read_only=True, data_only=True)
        try:
            ws = wb.worksheets[0]
            rows = [
                ["" if cell is None else cell for cell in row]
                for row in ws.iter_rows(values_only=True)
            ]
        finally:
            wb.close()

        records = self.build_records(rows, project)
        logger.info("Read %d record(s) for project %r from %s", len(records), project, path)
        return records

    def read_dicts(
        self, rows: Iterable[Mapping[str, Any]], project: str = ""
    ) -> List[Record]:
        """Read dicts keyed by the flat column names (``"Year"``, ...)."""
        positional = [[row.get(col, "") for col in COLUMNS] for row in rows]
        return self.build_records(positional, project)

    # ------------------------------------------------------------------ #
    # Project files
    # ------------------------------------------------------------------ #

    def load(self, path: Union[str, Path]) -> Dataset:
        """Load one project file into a ``Dataset``.

        Raises
        ------
        ValueError
            If the file type is not supported.
        """
        path = Path(path)
        label = parse_project_filename(path.name).label

        if path.suffix.lower() == ".csv":
            records = self.read_csv(path, label)
        elif path.suffix.lower() == ".xlsx":
            records = self.read_excel(path, label)
        else:
            raise ValueError(f"Unsupported project file type: {path.suffix!r}")

        return Dataset(project=label, records=tuple(records))

    def load_project(
        self, root: Union[str, Path], year: str, month: str, filename: str
    ) -> Dataset:
        """Load ``<root>/<year>/<month>/<filename>``; empty if it is missing."""
        path = Path(root) / year / month / filename
        if not path.is_file():
            logger.warning("Project file %s not found", path)
            return Dataset(project=parse_project_filename(filename).label)
        return self.load(path)


def discover_projects(
    root: Union[str, Path],
) -> Tuple[Dict[str, List[str]], Dict[str, ProjectInfo]]:
    """Scan ``<root>/<year>/<month>/*_flat.csv``.

    Returns
    -------
    tuple[dict, dict]
        ``({year: [month, ...]}, {filename: ProjectInfo})``.  Files without a
        leading project code are ignored.
    """
    root = Path(root)
    folders: Dict[str, List[str]] = {}
    projects: Dict[str, ProjectInfo] = {}

    if not root.is_dir():
        logger.warning("Project root %s does not exist", root)
        return folders, projects

    for year_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        for month_dir in sorted(p for p in year_dir.iterdir() if p.is_dir()):
            files = sorted(month_dir.glob(f"*{FLAT_SUFFIX}"))
            if not files:
                continue
            folders.setdefault(year_dir.name, []).append(month_dir.name)
            for file in files:
                info = parse_project_filename(file.name)
                if info.code is None:
                    logger.debug("Ignoring file without project code: %s", file)
                    continue
                projects[file.name] = ProjectInfo(
                    code=info.code,
                    name=info.name,
                    year=year_dir.name,
                    month=month_dir.name,
                    filename=file.name,
                    path=str(file),
                )

    logger.info(
        "Discovered %d project file(s) across %d year folder(s)",
        len(projects),
        len(folders),
    )
    return folders, projects
