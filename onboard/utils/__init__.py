"""Employee Onboarding - Utility modules."""

from onboard.utils.atomic_io import (
    atomic_create_text,
    atomic_write_bytes,
    atomic_write_text,
    cleanup_orphan_temp_files,
)
from onboard.utils.paths import audit_log_path, timestamp_id

__all__ = [
    # atomic_io
    "atomic_write_bytes",
    "atomic_write_text",
    "atomic_create_text",
    "cleanup_orphan_temp_files",
    # paths
    "audit_log_path",
    "timestamp_id",
]
