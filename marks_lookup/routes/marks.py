from fastapi import APIRouter, Depends, Response, status

from ..auth.dependencies import get_enrollment_number, get_sheets_reader
from ..log import get_logger
from ..schemas.marks import MarksReport
from ..services.report import build_report
from ..services.scanner import find_student_rows
from ..services.sheets import SheetsReader

router = APIRouter()

logger = get_logger("routes.marks")


def lookup_marks(reader: SheetsReader, enrollment_number: str) -> MarksReport:
    match = find_student_rows(reader, enrollment_number)
    return build_report(match.title_row, match.data_row)


@router.get(
    "",
    response_model=MarksReport,
    responses={
        400: {"description": "Missing or invalid enrollment number"},
        402: {"description": "Fees unpaid"},
        404: {"description": "Enrollment number not found"},
    },
)
def get_marks(
    enrollment_number: str = Depends(get_enrollment_number),
    reader: SheetsReader = Depends(get_sheets_reader),
):
    report = lookup_marks(reader, enrollment_number)
    if not report.fees:
        logger.info("Fees unpaid for %s, withholding marks", enrollment_number)
        return Response(status_code=status.HTTP_402_PAYMENT_REQUIRED)
    return report
