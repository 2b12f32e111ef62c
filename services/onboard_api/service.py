"""Employee Onboarding - Upload service logic.

Drives one CSV upload through the core:
- Spool the uploaded stream to a temp file under data/uploads
- Decode rows lazily from the temp file
- Validate against a snapshot of the users collection
- Commit accepted batches (store + audit log)

The temp file is removed on every exit path. Read-validate-commit and
reset run under a process-local lock so two requests served by threads of
the same process cannot both validate against the same stale snapshot.
Separate processes sharing one store are NOT serialized, and a starting
process removes spooled uploads that another process may still be reading
(see main._cleanup_orphan_files_safe).
"""

from __future__ import annotations

import logging
import tempfile
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from onboard.batch import CommitSummary, commit, list_users, reset
from onboard.config import UPLOADS_DIR
from onboard.csv_stream import iter_csv_rows
from onboard.errors import PersistenceFailure
from onboard.pipeline import Rejected, validate

if TYPE_CHECKING:
    from typing import BinaryIO

    from onboard.audit import AuditLog
    from onboard.store import DocumentStore, State

logger = logging.getLogger(__name__)

_mutation_lock = threading.Lock()

CHUNK_SIZE = 65536


def spool_upload(stream: BinaryIO, uploads_dir: str | Path = UPLOADS_DIR) -> Path:
    """Copy an upload stream to a new temp file.

    Args:
        stream: File-like object with read().
        uploads_dir: Directory for spooled uploads (created if missing).

    Returns:
        Path of the spooled file. The caller owns and must delete it.

    Raises:
        PersistenceFailure: If the temp file cannot be written.
    """
    uploads_dir = Path(uploads_dir)
    tmp_path: Path | None = None
    try:
        uploads_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=uploads_dir, delete=False, suffix=".csv") as tmp:
            tmp_path = Path(tmp.name)
            while chunk := stream.read(CHUNK_SIZE):
                tmp.write(chunk)
    except OSError as e:
        if tmp_path is not None:
            _remove_quietly(tmp_path)
        raise PersistenceFailure(f"Failed to write upload temp file: {e}") from e
    return tmp_path


def onboard_csv_file(
    store: DocumentStore,
    audit_log: AuditLog,
    csv_path: str | Path,
) -> CommitSummary | Rejected:
    """Validate a CSV file against the store and commit it if accepted.

    Args:
        store: Document store handle.
        audit_log: Audit log for committed batches.
        csv_path: UTF-8 CSV file (a leading BOM is tolerated).

    Returns:
        CommitSummary when the batch was committed, Rejected otherwise.

    Raises:
        DecodeFailure: If the CSV cannot be parsed (nothing is committed).
        PersistenceFailure: If the store or audit log fails.
    """
    with _mutation_lock:
        snapshot = store.load()
        try:
            fh = open(csv_path, encoding="utf-8-sig", newline="")
        except OSError as e:
            raise PersistenceFailure(f"Cannot open upload {csv_path}: {e}") from e
        with fh:
            result = validate(snapshot, iter_csv_rows(fh))

        if isinstance(result, Rejected):
            logger.warning("Duplicate emails found, upload rejected: %s", result.conflicting_emails)
            return result

        return commit(store, result.rows, audit_log)


def onboard_upload_stream(
    store: DocumentStore,
    audit_log: AuditLog,
    stream: BinaryIO,
    uploads_dir: str | Path = UPLOADS_DIR,
) -> CommitSummary | Rejected:
    """Onboard users from an uploaded CSV stream.

    Same contract as onboard_csv_file; the stream is spooled to a temp file
    that is deleted whether the batch is committed, rejected or fails.
    """
    tmp_path = spool_upload(stream, uploads_dir)
    try:
        return onboard_csv_file(store, audit_log, tmp_path)
    finally:
        _remove_quietly(tmp_path)


def reset_users(store: DocumentStore) -> None:
    """Clear the users collection under the mutation lock."""
    with _mutation_lock:
        reset(store)


def get_users(store: DocumentStore) -> State:
    """Return the users collection snapshot."""
    return list_users(store)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Failed to delete upload temp file %s", path, exc_info=True)
