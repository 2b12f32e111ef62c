"""Employee Onboarding - FastAPI application.

Endpoints:
- POST /upload: onboard users from a CSV upload (multipart field "file")
- GET /users: list onboarded users
- DELETE /reset: clear the users collection
- GET /health: liveness check

Run with:
    uvicorn services.onboard_api.main:app --reload  # dev server only
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

from fastapi import Depends, FastAPI, File, UploadFile
from fastapi.responses import JSONResponse

from onboard.audit import AuditLog
from onboard.config import LOGS_DIR, UPLOADS_DIR
from onboard.errors import (
    DecodeFailure,
    NoFileProvided,
    OnboardError,
    OnboardErrorCode,
    PersistenceFailure,
)
from onboard.pipeline import Rejected
from onboard.schemas import (
    ErrorResponse,
    ResetResponse,
    UploadConflictResponse,
    UploadSuccessResponse,
    UsersResponse,
)
from onboard.store import DocumentStore, JsonFileDocumentStore, create_store
from services.onboard_api.service import get_users, onboard_upload_stream, reset_users

logger = logging.getLogger(__name__)

# --- Store Setup ---

# Module-level handles (initialized on startup unless overridden)
_store: DocumentStore | None = None
_audit_log: AuditLog | None = None
_uploads_dir: Path = UPLOADS_DIR


def get_store() -> DocumentStore:
    """Dependency that provides the document store.

    Raises:
        RuntimeError: If the store is not initialized (app lifespan not invoked).
    """
    if _store is None:
        raise RuntimeError("Document store not initialized. App lifespan not invoked?")
    return _store


def get_audit_log() -> AuditLog:
    """Dependency that provides the audit log."""
    if _audit_log is None:
        raise RuntimeError("Audit log not initialized. App lifespan not invoked?")
    return _audit_log


# --- Lifespan ---


def _cleanup_orphan_files_safe() -> None:
    """Remove temp files left by interrupted writes and uploads (best-effort).

    Assumes a single server process: every *.csv in the uploads directory is
    treated as orphaned.
    """
    from onboard.utils.atomic_io import cleanup_orphan_temp_files

    targets = [(_uploads_dir, ".csv")]
    if _audit_log is not None:
        targets.append((_audit_log.directory, ".tmp"))
    if isinstance(_store, JsonFileDocumentStore):
        targets.append((_store.path.parent, ".tmp"))

    try:
        total_cleaned = sum(cleanup_orphan_temp_files(d, suffix) for d, suffix in targets)
        if total_cleaned > 0:
            logger.info("Startup cleanup: removed %d orphan temp files", total_cleaned)
    except Exception:
        # Never crash startup
        logger.warning("Startup cleanup failed (non-fatal)", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Opens the document store and audit log on startup (unless overridden
    for tests) and cleans up orphan temp files.
    """
    global _store, _audit_log
    created_store = False
    if _store is None:
        _store = create_store()
        created_store = True
    if _audit_log is None:
        _audit_log = AuditLog(LOGS_DIR)

    _cleanup_orphan_files_safe()

    yield

    if created_store:
        _store.close()
        _store = None


# --- FastAPI App ---


app = FastAPI(
    title="Employee Onboarding API",
    description="CSV onboarding with batch-level duplicate email rejection.",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Error Handling ---


def error_code_to_status(error_code: str) -> int:
    """Map error codes to HTTP status codes.

    - NO_FILE_PROVIDED -> 400
    - DECODE_FAILED, PERSISTENCE_FAILED, INGEST_FAILED -> 500
    """
    if error_code == OnboardErrorCode.NO_FILE_PROVIDED:
        return 400
    return 500


def make_error_response(error_code: str, error_message: str) -> JSONResponse:
    """Create a JSON error response."""
    return JSONResponse(
        status_code=error_code_to_status(error_code),
        content=ErrorResponse(
            error_code=error_code,
            error_message=error_message,
        ).model_dump(),
    )


# --- Endpoints ---


@app.post(
    "/upload",
    response_model=UploadSuccessResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No file uploaded"},
        409: {"model": UploadConflictResponse, "description": "Duplicate emails found"},
        500: {"model": ErrorResponse, "description": "CSV parse or persistence failure"},
    },
    summary="Onboard users from a CSV file",
    description=(
        'CSV header: "Employee Id","First Name","Last Name","Email Address". '
        "The whole batch is rejected if any email already exists."
    ),
)
async def upload(
    store: Annotated[DocumentStore, Depends(get_store)],
    audit_log: Annotated[AuditLog, Depends(get_audit_log)],
    file: Annotated[UploadFile | None, File(description="CSV file of employees")] = None,
):
    """Onboard a CSV batch.

    Rows without an email are skipped. Emails are compared trimmed and
    case-insensitively against already onboarded users; any match rejects
    the entire upload with every duplicate listed.
    """
    if file is None:
        e = NoFileProvided()
        return make_error_response(e.error_code, e.message)

    try:
        result = onboard_upload_stream(
            store=store,
            audit_log=audit_log,
            stream=file.file,
            uploads_dir=_uploads_dir,
        )
    except DecodeFailure as e:
        logger.error("CSV processing error: %s", e.message)
        return make_error_response(e.error_code, e.message)
    except PersistenceFailure as e:
        logger.error("Persistence error during upload: %s", e.message)
        return make_error_response(e.error_code, e.message)
    except OnboardError as e:
        return make_error_response(e.error_code, e.message)
    except Exception:
        # Log full exception server-side, return generic message to client
        logger.exception("Unexpected error during upload")
        return make_error_response(
            OnboardErrorCode.INGEST_FAILED,
            "Internal server error",
        )
    finally:
        await file.close()

    if isinstance(result, Rejected):
        return JSONResponse(
            status_code=409,
            content=UploadConflictResponse(
                message="Duplicate emails found. Upload failed.",
                duplicates=result.conflicting_emails,
            ).model_dump(),
        )

    return UploadSuccessResponse(
        message=f"Successfully onboarded {result.committed_count} user(s).",
        onboarded_users=result.rows,
        log_file=result.audit_id,
    )


@app.get(
    "/users",
    response_model=UsersResponse,
    responses={500: {"model": ErrorResponse, "description": "Store read failed"}},
    summary="List onboarded users",
)
def users(store: Annotated[DocumentStore, Depends(get_store)]):
    """Return every onboarded user in insertion order."""
    try:
        return UsersResponse(users=get_users(store))
    except PersistenceFailure as e:
        logger.error("Failed to fetch users: %s", e.message)
        return make_error_response(e.error_code, e.message)


@app.delete(
    "/reset",
    response_model=ResetResponse,
    responses={500: {"model": ErrorResponse, "description": "Store write failed"}},
    summary="Clear all onboarded users",
)
def reset(store: Annotated[DocumentStore, Depends(get_store)]):
    """Empty the users collection. Audit logs are kept."""
    try:
        reset_users(store)
    except PersistenceFailure as e:
        logger.error("Reset failed: %s", e.message)
        return make_error_response(e.error_code, e.message)
    return ResetResponse(message="Database reset complete.")


@app.get("/health", summary="Health check")
def health_check():
    """Simple health check endpoint."""
    return {"status": "ok"}


# --- For testing: allow overriding store handles ---


def override_store(
    store: DocumentStore | None,
    audit_log: AuditLog | None = None,
    uploads_dir: str | Path | None = None,
) -> None:
    """Override the store, audit log and upload spool directory for testing."""
    global _store, _audit_log, _uploads_dir
    _store = store
    _audit_log = audit_log
    _uploads_dir = Path(uploads_dir) if uploads_dir is not None else UPLOADS_DIR
