from typing import Optional


class MarksLookupError(Exception):
    """
    Base class for every failure the marks endpoint knows how to report.

    `detail` is the only text that may reach the HTTP response. The exception
    message itself can carry internal context and is meant for the log.
    """

    status_code = 500
    detail: Optional[str] = "Internal server error"


class ConfigError(MarksLookupError):
    detail = "Service is not configured"


class InvalidEnrollmentNumberError(MarksLookupError):
    status_code = 400
    detail = "enrollment_number must be exactly 11 digits"


class StudentNotFoundError(MarksLookupError):
    status_code = 404
    detail = None


class UpstreamAuthError(MarksLookupError):
    status_code = 502
    detail = "Could not authenticate with Google"


class UpstreamFetchError(MarksLookupError):
    status_code = 502
    detail = "Could not read the marks spreadsheet"


class ColumnResolutionError(MarksLookupError):
    detail = "Marks spreadsheet layout is not recognised"


class MarkParseError(MarksLookupError):
    detail = "Marks spreadsheet contains an unreadable mark"

    def __init__(self, subject: str, column: int, value: str):
        super().__init__(f"mark for {subject!r} in column {column} is not a number: {value!r}")
        self.subject = subject
        self.column = column
        self.value = value
