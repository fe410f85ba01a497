import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Sequence

from ..errors import ColumnResolutionError, MarkParseError
from ..schemas.marks import MarksReport, Subject
from .scanner import TITLE_CELL_PATTERN


COURSE_PATTERN = re.compile(r"^course", re.IGNORECASE)
FEE_PATTERN = re.compile(r"^fee", re.IGNORECASE)
NAME_PATTERN = re.compile(r"name$", re.IGNORECASE)
SEMESTER_PATTERN = re.compile(r"year", re.IGNORECASE)

# ASCII digits only: int() would also accept other scripts' digits.
MARK_PATTERN = re.compile(r"^[0-9]+$")


@dataclass(frozen=True)
class ColumnIndices:
    course: int
    fee: int
    name: int
    semester: int

    def as_set(self) -> set[int]:
        return {self.course, self.fee, self.name, self.semester}


def find_column(title_row: Sequence[str], pattern: Pattern[str]) -> Optional[int]:
    for index, cell in enumerate(title_row):
        if pattern.search(cell):
            return index
    return None


def resolve_columns(title_row: Sequence[str]) -> ColumnIndices:
    found = {}
    for label, pattern in (
        ("course", COURSE_PATTERN),
        ("fee", FEE_PATTERN),
        ("name", NAME_PATTERN),
        ("semester", SEMESTER_PATTERN),
    ):
        index = find_column(title_row, pattern)
        if index is None:
            raise ColumnResolutionError(f"title row has no {label} column")
        found[label] = index
    return ColumnIndices(**found)


def locate_subject_blocks(title_row: Sequence[str], skip: Iterable[int] = ()) -> List[int]:
    """
    Start index of every subject block in the title row.

    A subject title sits in its internal-mark column and is followed by blank
    title cells, so the cell left of the first blank in each run of blanks is
    a subject start. Columns in `skip` (the student detail columns) are never
    subjects even when a blank follows them.
    """
    skipped = set(skip)
    starts: List[int] = []
    for index, cell in enumerate(title_row):
        if cell != "" or index == 0:
            continue
        start = index - 1
        if title_row[start] == "" or start in skipped:
            continue
        starts.append(start)
    return starts


def _cell(row: Sequence[str], index: int) -> str:
    # Sheets drops trailing blank cells, so short rows are padded with "".
    return row[index] if 0 <= index < len(row) else ""


def parse_mark(row: Sequence[str], index: int, subject: str) -> int:
    value = _cell(row, index).strip()
    if not MARK_PATTERN.match(value):
        raise MarkParseError(subject, index, value)
    return int(value)


def extract_subjects(
    title_row: Sequence[str], data_row: Sequence[str], starts: Sequence[int]
) -> List[Subject]:
    subjects: List[Subject] = []
    for i, start in enumerate(starts):
        name = title_row[start]
        internal = parse_mark(data_row, start, name)

        # The external mark is not at a fixed offset. Every block but the last
        # has a blank spacer column before the next subject, so its external
        # mark sits two columns left of the next start. The last block has no
        # spacer and its external mark is the column right after the start.
        # Do not fold these into one formula: the sheet layout really differs.
        if i == len(starts) - 1:
            external_index = start + 1
        else:
            external_index = starts[i + 1] - 2
        external = parse_mark(data_row, external_index, name)

        subjects.append(
            Subject(name=name, internal=internal, external=external, total=internal + external)
        )
    return subjects


def fees_paid(value: str) -> bool:
    return value.strip().upper().startswith("Y")


def build_report(title_row: Sequence[str], data_row: Sequence[str]) -> MarksReport:
    columns = resolve_columns(title_row)
    skip = columns.as_set()
    enrollment_column = find_column(title_row, TITLE_CELL_PATTERN)
    if enrollment_column is not None:
        skip.add(enrollment_column)

    starts = locate_subject_blocks(title_row, skip=skip)
    return MarksReport(
        course=_cell(data_row, columns.course),
        fees=fees_paid(_cell(data_row, columns.fee)),
        name=_cell(data_row, columns.name),
        semester=_cell(data_row, columns.semester),
        subjects=extract_subjects(title_row, data_row, starts),
    )
