"""
Spreadsheet loading for imports.

Reads the first sheet of an .xlsx workbook (openpyxl) or a .csv file into a
list of rows, header row first. Cell values are returned as-is (numbers,
dates, booleans or text); interpretation is left to the column reader.
"""
import csv
import io
import logging
from pathlib import Path

from openpyxl import load_workbook

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {".csv", ".xlsx", ".xlsm"}


class TableReadError(ValueError):
    """The file could not be read as a header + data table."""


def read_table(path: Path) -> list[list]:
    """Load a table from disk."""
    path = Path(path)
    if not path.exists():
        raise TableReadError(f"File not found: {path}")
    return read_table_bytes(path.read_bytes(), path.name)


def read_table_bytes(content: bytes, filename: str) -> list[list]:
    """
    Load a table from uploaded bytes; *filename* picks the format.

    Raises TableReadError for unsupported formats, unreadable content, or a
    sheet without at least one data row.
    """
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise TableReadError(
            f"Unsupported file type {suffix or '(none)'}; use .xlsx or .csv"
        )

    try:
        rows = _read_csv(content) if suffix == ".csv" else _read_xlsx(content)
    except TableReadError:
        raise
    except Exception as exc:
        raise TableReadError(f"Could not read file {filename}: {exc}") from exc

    rows = [r for r in rows if any(c not in (None, "") for c in r)]
    if len(rows) < 2:
        raise TableReadError("Sheet is empty")

    logger.info("Loaded %s: %d data rows, %d columns", filename, len(rows) - 1, len(rows[0]))
    return rows


def _read_csv(content: bytes) -> list[list]:
    text = content.decode("utf-8-sig", errors="replace")
    return [list(r) for r in csv.reader(io.StringIO(text))]


def _read_xlsx(content: bytes) -> list[list]:
    wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        return [list(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()
