"""Export of a merged history as a spreadsheet-friendly report.

The format is derived from the file extension:

    .csv   comma-separated values
    .ods   OpenDocument spreadsheet (odfpy)
    .xlsx  Office Open XML workbook (openpyxl)

Every format carries the same header row followed by one row per commit in
history order.
"""

import csv
import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from odf import teletype
from odf.opendocument import OpenDocumentSpreadsheet
from odf.table import Table, TableCell, TableRow
from odf.text import P
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from oper.models.history import History

logger = logging.getLogger(__name__)

REPORT_HEADER = ("Commit Date", "Local Path of Repo", "Commit Author", "Summary", "Message")

SHEET_NAME = "oper report"

Row = tuple[str, ...]


class ReportError(Exception):
    """Raised when a report cannot be written."""


def _rows(history: History) -> Iterator[Row]:
    """Yield the header and one row per commit."""
    yield REPORT_HEADER
    for entry in history.entries:
        commit = entry.commit
        yield (
            commit.time_as_str,
            entry.repository.rel_path,
            commit.author,
            commit.summary,
            commit.message,
        )


def _xml_safe(value: str) -> str:
    """Drop control characters that XML based formats cannot store."""
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def _write_csv(rows: Iterator[Row], path: Path) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        csv.writer(f).writerows(rows)


def _write_xlsx(rows: Iterator[Row], path: Path) -> None:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_NAME
    for row_index, row in enumerate(rows, start=1):
        for column, value in enumerate(row, start=1):
            cell = sheet.cell(row=row_index, column=column, value=_xml_safe(value))
            # Summaries starting with "=" are text, not formulas
            cell.data_type = "s"
    workbook.save(path)


def _write_ods(rows: Iterator[Row], path: Path) -> None:
    document = OpenDocumentSpreadsheet()
    table = Table(name=SHEET_NAME)
    for row in rows:
        table_row = TableRow()
        for value in row:
            cell = TableCell(valuetype="string")
            paragraph = P()
            teletype.addTextToElement(paragraph, _xml_safe(value))
            cell.addElement(paragraph)
            table_row.addElement(cell)
        table.addElement(table_row)
    document.spreadsheet.addElement(table)
    document.save(str(path))


_WRITERS: dict[str, Callable[[Iterator[Row], Path], None]] = {
    ".csv": _write_csv,
    ".ods": _write_ods,
    ".xlsx": _write_xlsx,
}

SUPPORTED_SUFFIXES = tuple(_WRITERS)


def write_report(history: History, path: Path) -> int:
    """Write the merged history to a report file.

    Args:
        history: Merged history to export.
        path: Destination file; its extension selects the format.

    Returns:
        Number of commit records written.

    Raises:
        ReportError: If the extension is unsupported or writing fails.
    """
    writer = _WRITERS.get(path.suffix.lower())
    if writer is None:
        msg = (
            f"Couldn't derive report format from '{path.name}'. "
            f"Supported endings are: {', '.join(SUPPORTED_SUFFIXES)}"
        )
        raise ReportError(msg)

    try:
        writer(_rows(history), path)
    except OSError as e:
        raise ReportError(f"Failed to write report {path}: {e}") from e

    logger.debug("Wrote %d commit(s) to %s", history.commit_count, path)
    return history.commit_count
