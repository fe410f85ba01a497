import re
from typing import Iterator, Optional

from fastapi import Depends, Query

from ..config import Settings, get_settings
from ..errors import InvalidEnrollmentNumberError
from ..services.sheets import GoogleSheetsClient, SheetsReader


ENROLLMENT_NUMBER_PATTERN = re.compile(r"^[0-9]{11}$")


def validate_enrollment_number(value: Optional[str]) -> str:
    enrollment_number = (value or "").strip()
    if not ENROLLMENT_NUMBER_PATTERN.match(enrollment_number):
        raise InvalidEnrollmentNumberError(f"rejected enrollment number {value!r}")
    return enrollment_number


def get_enrollment_number(
    enrollment_number: Optional[str] = Query(None, description="11 digit enrollment number"),
) -> str:
    # Declared optional so a missing value reaches our own 400 handling
    # before any other dependency (and so any upstream call) runs.
    return validate_enrollment_number(enrollment_number)


def get_sheets_reader(settings: Settings = Depends(get_settings)) -> Iterator[SheetsReader]:
    client = GoogleSheetsClient(settings)
    try:
        yield client
    finally:
        client.session.close()
