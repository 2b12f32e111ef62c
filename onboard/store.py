"""Employee Onboarding - Document store.

Persists the single logical "users" collection across process restarts
behind a load()/save() interface. Two backends:

- JsonFileDocumentStore: one JSON file holding {"users": [...]}, published
  with the atomic temp + fsync + rename rule.
- SqlDocumentStore: a SQLAlchemy "documents" table keyed by collection name.

load() always returns a fresh list the caller may hold as a snapshot;
mutating it does not touch persisted state. All read/write failures are
raised as PersistenceFailure.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from onboard.config import JSON_DB_PATH, SQLITE_DB_PATH, STORE_BACKEND, USERS_COLLECTION
from onboard.errors import PersistenceFailure
from onboard.models import Document
from onboard.utils.atomic_io import atomic_write_text

if TYPE_CHECKING:
    from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)

UserRecord = dict[str, str]
State = list[UserRecord]


def _checked_records(records: list, source: str) -> State:
    """Copy stored records, rejecting anything that is not a string-valued mapping."""
    state = []
    for index, record in enumerate(records):
        if not isinstance(record, dict) or not all(
            isinstance(value, str) or value is None for value in record.values()
        ):
            raise PersistenceFailure(f"Record {index} in {source} is not a mapping of strings")
        state.append(dict(record))
    return state


class DocumentStore(ABC):
    """Key-document store holding one ordered collection of user records."""

    collection: str = USERS_COLLECTION

    @abstractmethod
    def load(self) -> State:
        """Return a snapshot of the persisted collection (insertion order)."""

    @abstractmethod
    def save(self, state: State) -> None:
        """Durably replace the persisted collection with state."""

    def initialize(self) -> None:
        """Create the empty collection document if none exists yet."""
        self.save(self.load())

    def close(self) -> None:
        """Release backend resources (no-op by default)."""


class JsonFileDocumentStore(DocumentStore):
    """Document store backed by a single JSON file."""

    def __init__(self, path: str | Path = JSON_DB_PATH, collection: str = USERS_COLLECTION):
        self.path = Path(path)
        self.collection = collection

    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"Cannot read {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise PersistenceFailure(f"{self.path} does not hold a JSON object")
        return document

    def load(self) -> State:
        document = self._read_document()
        records = document.get(self.collection) or []
        if not isinstance(records, list):
            raise PersistenceFailure(f"'{self.collection}' in {self.path} is not a list")
        return _checked_records(records, str(self.path))

    def save(self, state: State) -> None:
        # Other top-level keys in the document are preserved.
        document = self._read_document()
        document[self.collection] = list(state)
        try:
            text = json.dumps(document, indent=2, ensure_ascii=False)
            atomic_write_text(self.path, text)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceFailure(f"Cannot write {self.path}: {e}") from e
        logger.debug("Saved %d %s record(s) to %s", len(state), self.collection, self.path)


class SqlDocumentStore(DocumentStore):
    """Document store backed by a SQLAlchemy "documents" table."""

    def __init__(self, session_factory: sessionmaker, collection: str = USERS_COLLECTION):
        self.session_factory = session_factory
        self.collection = collection

    def load(self) -> State:
        session = self.session_factory()
        try:
            document = session.get(Document, self.collection)
            if document is None:
                return []
            return _checked_records(document.body or [], f"document '{self.collection}'")
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Cannot read document '{self.collection}': {e}") from e
        finally:
            session.close()

    def save(self, state: State) -> None:
        session = self.session_factory()
        try:
            document = session.get(Document, self.collection)
            if document is None:
                document = Document(name=self.collection)
                session.add(document)
            # Assign a new list so the JSON column is flagged dirty.
            document.body = [dict(record) for record in state]
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceFailure(f"Cannot write document '{self.collection}': {e}") from e
        finally:
            session.close()
        logger.debug("Saved %d %s record(s) to documents table", len(state), self.collection)

    def close(self) -> None:
        bind = self.session_factory.kw.get("bind")
        if bind is not None:
            bind.dispose()


def create_store(
    backend: str = STORE_BACKEND,
    json_path: str | Path = JSON_DB_PATH,
    sqlite_path: str | Path = SQLITE_DB_PATH,
) -> DocumentStore:
    """Create and initialize a document store for the configured backend.

    Args:
        backend: "json" or "sqlite".
        json_path: File used by the JSON backend.
        sqlite_path: Database file used by the SQLite backend.

    Returns:
        An initialized DocumentStore (empty collection created if missing).

    Raises:
        ValueError: If backend is unknown.
        PersistenceFailure: If the store cannot be initialized.
    """
    if backend == "json":
        store: DocumentStore = JsonFileDocumentStore(json_path)
    elif backend == "sqlite":
        # Local import keeps the JSON backend free of engine setup.
        from onboard.db import init_db

        try:
            _, SessionFactory = init_db(sqlite_path)
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Cannot open database {sqlite_path}: {e}") from e
        store = SqlDocumentStore(SessionFactory)
    else:
        raise ValueError(f"Unknown store backend: {backend!r}")

    store.initialize()
    logger.info("Document store ready (backend=%s)", backend)
    return store


__all__ = [
    "UserRecord",
    "State",
    "DocumentStore",
    "JsonFileDocumentStore",
    "SqlDocumentStore",
    "create_store",
]
