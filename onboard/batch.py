"""Employee Onboarding - Batch committer and collection operations.

commit() is only called for an Accepted batch:
1. Re-load current state from the store (the validation snapshot may be stale)
2. Append accepted rows in order
3. Save synchronously (durable before returning)
4. Write an audit record of exactly the accepted rows
5. Return a CommitSummary

If loading or saving fails, no audit record is produced. The store has no
rollback: a failed audit write after a successful save leaves the users
committed and is still reported as a failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from onboard.audit import AuditLog, AuditRecord
from onboard.store import DocumentStore, State, UserRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitSummary:
    """Result of a successful commit."""

    committed_count: int
    audit_id: str
    rows: list[UserRecord]


def commit(
    store: DocumentStore,
    accepted: list[UserRecord],
    audit_log: AuditLog,
    now: datetime | None = None,
) -> CommitSummary:
    """Append accepted rows to the store and write an audit record.

    Args:
        store: Document store handle.
        accepted: Rows from an Accepted ingestion result.
        audit_log: Destination for the batch's audit artifact.
        now: Commit timestamp override (defaults to current UTC time).

    Returns:
        CommitSummary with row count, audit identifier and the rows.

    Raises:
        PersistenceFailure: If the store or audit log cannot be written.
    """
    rows = [dict(row) for row in accepted]

    state = store.load()
    state.extend(rows)
    store.save(state)

    record = AuditRecord(created_at=now or datetime.now(UTC), users=rows)
    audit_id = audit_log.write(record)

    logger.info("Onboarded %d user(s). Log saved to: %s", len(rows), audit_id)
    return CommitSummary(committed_count=len(rows), audit_id=audit_id, rows=rows)


def reset(store: DocumentStore) -> None:
    """Replace the persisted collection with an empty one. Idempotent."""
    store.save([])
    logger.info("Collection '%s' reset", store.collection)


def list_users(store: DocumentStore) -> State:
    """Return the current collection verbatim, insertion order preserved."""
    return store.load()


__all__ = ["CommitSummary", "commit", "reset", "list_users"]
