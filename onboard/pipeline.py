"""Employee Onboarding - Ingestion pipeline.

Validates an incoming batch of CSV rows against the existing user
collection and decides, for the batch as a whole, Accepted or Rejected.

Rules:
1. Existing emails are normalized (trimmed, lower-cased) into a membership
   set once, before the first incoming row is consumed.
2. Rows with an absent or blank Email Address are skipped with a warning.
3. A row whose normalized email is in the existing set is a conflict; the
   normalized email is recorded and the row is not accepted.
4. Rows within the same batch are NOT checked against each other; two new
   rows sharing an email are both accepted.
5. The row iterator is always drained completely so every conflict is
   reported and the upload stream can be released.

Performs no I/O. Accepted rows keep their original (non-normalized) values.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from onboard.config import EMAIL_FIELD
from onboard.store import State, UserRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Accepted:
    """Batch passed validation; rows are ready to commit."""

    rows: list[UserRecord] = field(default_factory=list)


@dataclass(frozen=True)
class Rejected:
    """Batch conflicts with existing users.

    conflicting_emails holds distinct normalized emails in first-seen order.
    """

    conflicting_emails: list[str]


IngestionResult = Accepted | Rejected


def normalize_email(value: str | None) -> str:
    """Normalize an email for comparison: trim whitespace and lower-case.

    Never used for storage.
    """
    if not value:
        return ""
    return value.strip().lower()


def existing_email_set(existing_state: State) -> set[str]:
    """Build the normalized membership set of already onboarded emails."""
    emails = set()
    for record in existing_state:
        email = normalize_email(record.get(EMAIL_FIELD))
        if email:
            emails.add(email)
    return emails


def validate(
    existing_state: State,
    incoming_rows: Iterable[Mapping[str, str | None]],
) -> IngestionResult:
    """Validate an incoming batch against the existing collection.

    Args:
        existing_state: Read-only snapshot of persisted users.
        incoming_rows: Lazy, single-pass sequence of decoded CSV rows.

    Returns:
        Accepted with the valid rows in input order, or Rejected with every
        distinct conflicting email.

    Raises:
        DecodeFailure: Propagated from incoming_rows if the stream is malformed.
    """
    existing_emails = existing_email_set(existing_state)

    accepted: list[UserRecord] = []
    # dict as an insertion-ordered set
    conflicts: dict[str, None] = {}
    skipped = 0

    for row in incoming_rows:
        email = normalize_email(row.get(EMAIL_FIELD))
        if not email:
            skipped += 1
            logger.warning("Skipped row with missing email: %s", dict(row))
            continue

        if email in existing_emails:
            conflicts[email] = None
        else:
            accepted.append(dict(row))

    if skipped:
        logger.info("Skipped %d row(s) without an email address", skipped)

    if conflicts:
        logger.info("Batch rejected: %d duplicate email(s)", len(conflicts))
        return Rejected(conflicting_emails=list(conflicts))

    return Accepted(rows=accepted)


__all__ = [
    "Accepted",
    "Rejected",
    "IngestionResult",
    "normalize_email",
    "existing_email_set",
    "validate",
]
