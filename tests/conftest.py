"""Shared pytest fixtures for Employee Onboarding tests.

This module contains common fixtures used across multiple test files:
document stores (both backends), audit log, upload spool directory and
the API test client.
"""

import pytest
from fastapi.testclient import TestClient

from onboard.audit import AuditLog
from onboard.store import create_store
from services.onboard_api.main import app, override_store


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    """Create an isolated document store for each backend.

    Yields:
        DocumentStore: initialized with an empty users collection.
    """
    data_dir = tmp_path / "data"
    store = create_store(
        request.param,
        json_path=data_dir / "db.json",
        sqlite_path=data_dir / "onboard.db",
    )
    yield store
    store.close()


@pytest.fixture
def audit_log(tmp_path):
    """Create an audit log in a temporary logs directory."""
    return AuditLog(tmp_path / "logs")


@pytest.fixture
def uploads_dir(tmp_path):
    """Temporary directory for spooled uploads."""
    return tmp_path / "uploads"


@pytest.fixture
def client(store, audit_log, uploads_dir):
    """Create a FastAPI test client bound to temporary store and logs.

    Yields:
        tuple: (test_client, store, audit_log)
    """
    override_store(store, audit_log, uploads_dir)

    with TestClient(app) as client:
        yield client, store, audit_log

    override_store(None)
