import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..errors import ColumnResolutionError, StudentNotFoundError
from ..log import get_logger
from .sheets import SheetsReader


TITLE_CELL_PATTERN = re.compile(r"^enroll?ment\s*no\.$", re.IGNORECASE)

logger = get_logger("scanner")


@dataclass(frozen=True)
class RowMatch:
    sheet_title: str
    title_row: List[str]
    data_row: List[str]


def trim_row(row: Sequence[str]) -> List[str]:
    return [str(cell).strip() for cell in row]


def is_title_row(row: Sequence[str]) -> bool:
    return any(TITLE_CELL_PATTERN.match(cell) for cell in row)


def is_data_row(row: Sequence[str], enrollment_number: str) -> bool:
    return enrollment_number in row


def match_rows(rows: Sequence[Sequence[str]], enrollment_number: str):
    """
    Find the student's row in one sheet.

    Returns (title_row, data_row) with cells trimmed, or None when the sheet
    has no row for this enrollment number. The title row is the nearest one
    above the data row; a sheet whose title row only appears further down
    falls back to its first title row.
    """
    title_row: Optional[List[str]] = None
    first_title: Optional[List[str]] = None
    data_row: Optional[List[str]] = None

    for raw in rows:
        row = trim_row(raw)
        if data_row is None and is_data_row(row, enrollment_number):
            data_row = row
        elif is_title_row(row):
            if data_row is None:
                title_row = row
            if first_title is None:
                first_title = row
        if data_row is not None and first_title is not None:
            break

    if data_row is None:
        return None
    return title_row or first_title, data_row


def find_student_rows(reader: SheetsReader, enrollment_number: str) -> RowMatch:
    sheets = reader.list_sheets()
    logger.info("Scanning %d sheets for %s", len(sheets), enrollment_number)

    for sheet in sheets:
        found = match_rows(reader.get_rows(sheet.title), enrollment_number)
        if found is None:
            continue
        title_row, data_row = found
        if title_row is None:
            raise ColumnResolutionError(f"sheet {sheet.title!r} has no enrollment number title row")
        logger.info("Found %s in sheet %r", enrollment_number, sheet.title)
        return RowMatch(sheet_title=sheet.title, title_row=title_row, data_row=data_row)

    raise StudentNotFoundError(f"{enrollment_number} not found in {len(sheets)} sheets")
