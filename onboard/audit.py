"""Employee Onboarding - Append-only audit log.

Each committed batch produces one JSON artifact:

    {logs_dir}/onboarded_users_{timestamp-id}.json
    {"schema_id": "onboarded_users.v1", "created_at": "...Z", "count": n, "users": [...]}

Artifacts are published exclusively: an existing artifact is never
overwritten. When two commits land in the same millisecond the later one
gets a numeric suffix (-1, -2, ...).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from onboard.config import LOGS_DIR
from onboard.errors import PersistenceFailure
from onboard.store import UserRecord
from onboard.utils.atomic_io import atomic_create_text
from onboard.utils.paths import audit_log_path, timestamp_id

logger = logging.getLogger(__name__)

AUDIT_SCHEMA_ID = "onboarded_users.v1"

# Upper bound on suffixed names tried for one timestamp
MAX_COLLISION_ATTEMPTS = 1000


@dataclass(frozen=True)
class AuditRecord:
    """Immutable record of the rows committed by one batch."""

    created_at: datetime
    users: list[UserRecord]

    def to_document(self) -> dict:
        return {
            "schema_id": AUDIT_SCHEMA_ID,
            "created_at": self.created_at.astimezone(UTC).isoformat().replace("+00:00", "Z"),
            "count": len(self.users),
            "users": self.users,
        }


class AuditLog:
    """Directory of timestamp-keyed audit artifacts."""

    def __init__(self, directory: str | Path = LOGS_DIR):
        self.directory = Path(directory)

    def identifier(self, path: Path) -> str:
        """Caller-facing identifier: "<dir name>/<file name>"."""
        return f"{self.directory.name}/{path.name}"

    def write(self, record: AuditRecord) -> str:
        """Publish record as a new artifact.

        Args:
            record: The audit record to persist.

        Returns:
            Identifier of the written artifact.

        Raises:
            PersistenceFailure: If the artifact cannot be written.
        """
        ts_id = timestamp_id(record.created_at.astimezone(UTC))
        text = json.dumps(record.to_document(), indent=2, ensure_ascii=False)

        for attempt in range(MAX_COLLISION_ATTEMPTS):
            path = audit_log_path(self.directory, ts_id, attempt)
            try:
                atomic_create_text(path, text)
            except FileExistsError:
                continue
            except OSError as e:
                raise PersistenceFailure(f"Cannot write audit log {path}: {e}") from e
            logger.info("Audit log saved to: %s", path)
            return self.identifier(path)

        raise PersistenceFailure(f"No free audit log name for timestamp {ts_id}")

    def read(self, identifier: str) -> dict:
        """Load a previously written artifact by identifier."""
        path = self.directory / Path(identifier).name
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"Cannot read audit log {path}: {e}") from e
