"""Employee Onboarding - Error taxonomy.

Error codes surfaced to API callers. A duplicate email is not an
exception: it is reported as a Rejected ingestion result (HTTP 409).
Malformed rows (missing email) are skipped and never surfaced.
"""

from __future__ import annotations

from enum import StrEnum


class OnboardErrorCode(StrEnum):
    """Error codes for the onboarding API."""

    NO_FILE_PROVIDED = "NO_FILE_PROVIDED"
    DECODE_FAILED = "DECODE_FAILED"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    INGEST_FAILED = "INGEST_FAILED"


class OnboardError(Exception):
    """Base exception for onboarding errors."""

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class NoFileProvided(OnboardError):
    """Upload request carried no file."""

    def __init__(self):
        super().__init__(OnboardErrorCode.NO_FILE_PROVIDED, "No file uploaded")


class DecodeFailure(OnboardError):
    """The uploaded CSV stream could not be parsed."""

    def __init__(self, reason: str, line_num: int | None = None):
        self.line_num = line_num
        where = f" (line {line_num})" if line_num is not None else ""
        super().__init__(OnboardErrorCode.DECODE_FAILED, f"Error parsing CSV file{where}: {reason}")


class PersistenceFailure(OnboardError):
    """Store or audit log read/write failed."""

    def __init__(self, reason: str):
        super().__init__(OnboardErrorCode.PERSISTENCE_FAILED, f"Persistence failed: {reason}")


__all__ = [
    "OnboardErrorCode",
    "OnboardError",
    "NoFileProvided",
    "DecodeFailure",
    "PersistenceFailure",
]
