"""Employee Onboarding - Canonical path utilities.

Returns canonical Paths. Does NOT create directories.
Directory creation is the responsibility of the calling code.
"""

from datetime import datetime
from pathlib import Path

from onboard.config import AUDIT_FILE_PREFIX, AUDIT_FILE_SUFFIX


def timestamp_id(moment: datetime) -> str:
    """Derive a storage-safe identifier from a UTC timestamp.

    ISO-8601 with millisecond precision and a "Z" suffix, with ":" and "."
    replaced by "-" so the result is safe as a file name on every platform.

    Args:
        moment: Timezone-aware datetime (converted to UTC by the caller).

    Returns:
        Identifier such as "2024-05-01T12-30-05-123Z".
    """
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def audit_log_path(logs_dir: Path, ts_id: str, attempt: int = 0) -> Path:
    """Get canonical path for an onboarded-users audit artifact.

    Args:
        logs_dir: Audit log directory.
        ts_id: Identifier from timestamp_id().
        attempt: Collision counter; 0 means no suffix.

    Returns:
        Path: {logs_dir}/onboarded_users_{ts_id}[-{attempt}].json
    """
    suffix = f"-{attempt}" if attempt else ""
    return logs_dir / f"{AUDIT_FILE_PREFIX}{ts_id}{suffix}{AUDIT_FILE_SUFFIX}"
