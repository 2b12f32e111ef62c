"""Employee Onboarding - Crash resilience tests.

Kill/restart scenarios for the document store and audit log write paths.
All tests use subprocess isolation to verify real crash behavior:

- Run store/audit code in a subprocess with a failpoint enabled
- Verify the subprocess exits with the failpoint exit code
- Verify the previously published document is intact
- Restart without failpoint and verify the write completes
- Assert no orphan temp files remain after startup cleanup
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from onboard.store import JsonFileDocumentStore
from onboard.utils.atomic_io import cleanup_orphan_temp_files
from onboard.utils.failpoints import get_active_failpoint, is_failpoint_enabled, maybe_fail

REPO_ROOT = Path(__file__).parent.parent

SAVE_SCRIPT = """
import sys
from onboard.store import JsonFileDocumentStore
store = JsonFileDocumentStore(sys.argv[1])
store.save(store.load() + [{"Employee Id": "E2", "Email Address": "new@yopmail.com"}])
"""

AUDIT_SCRIPT = """
import sys
from datetime import UTC, datetime
from onboard.audit import AuditLog, AuditRecord
print(AuditLog(sys.argv[1]).write(AuditRecord(created_at=datetime.now(UTC), users=[])))
"""


def run_script(
    script: str,
    *args: str,
    failpoint: str | None = None,
    exit_code: int = 42,
    timeout: float = 30.0,
) -> subprocess.CompletedProcess:
    """Run Python code in a subprocess, optionally with a failpoint enabled.

    Args:
        script: Python code to execute.
        args: Arguments exposed as sys.argv[1:].
        failpoint: Failpoint name to trigger (None disables failpoints).
        exit_code: Exit code used by the failpoint.
        timeout: Subprocess timeout in seconds.

    Returns:
        CompletedProcess result.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    env.pop("ONBOARD_ENABLE_FAILPOINTS", None)
    env.pop("ONBOARD_FAILPOINT", None)
    if failpoint is not None:
        env["ONBOARD_ENABLE_FAILPOINTS"] = "1"
        env["ONBOARD_FAILPOINT"] = failpoint
        env["ONBOARD_FAILPOINT_EXIT_CODE"] = str(exit_code)

    return subprocess.run(
        [sys.executable, "-c", script, *args],
        env=env,
        capture_output=True,
        timeout=timeout,
    )


@pytest.fixture
def db_path(tmp_path):
    """A users document holding one existing user."""
    path = tmp_path / "db.json"
    JsonFileDocumentStore(path).save([{"Employee Id": "E1", "Email Address": "old@yopmail.com"}])
    return path


class TestStoreCrash:
    """Crashes while saving the users document."""

    @pytest.mark.parametrize(
        "failpoint",
        ["ATOMIC_WRITE_AFTER_TMP_WRITE", "ATOMIC_WRITE_AFTER_FSYNC_BEFORE_RENAME"],
    )
    def test_crash_before_rename_keeps_previous_document(self, db_path, failpoint):
        result = run_script(SAVE_SCRIPT, str(db_path), failpoint=failpoint)

        assert result.returncode == 42, result.stderr.decode()
        assert JsonFileDocumentStore(db_path).load() == [
            {"Employee Id": "E1", "Email Address": "old@yopmail.com"}
        ]
        assert db_path.with_suffix(".json.tmp").exists()

    def test_crash_after_rename_document_is_complete(self, db_path):
        result = run_script(SAVE_SCRIPT, str(db_path), failpoint="ATOMIC_WRITE_AFTER_RENAME")

        assert result.returncode == 42, result.stderr.decode()
        users = json.loads(db_path.read_text(encoding="utf-8"))["users"]
        assert [u["Employee Id"] for u in users] == ["E1", "E2"]

    def test_restart_after_crash_completes_and_cleans_up(self, db_path):
        crashed = run_script(
            SAVE_SCRIPT, str(db_path), failpoint="ATOMIC_WRITE_AFTER_FSYNC_BEFORE_RENAME"
        )
        assert crashed.returncode == 42

        cleanup_orphan_temp_files(db_path.parent)
        restarted = run_script(SAVE_SCRIPT, str(db_path))

        assert restarted.returncode == 0, restarted.stderr.decode()
        assert len(JsonFileDocumentStore(db_path).load()) == 2
        assert list(db_path.parent.glob("*.tmp")) == []


class TestAuditCrash:
    """Crashes while publishing an audit artifact."""

    def test_crash_before_link_publishes_nothing(self, tmp_path):
        logs_dir = tmp_path / "logs"

        result = run_script(
            AUDIT_SCRIPT, str(logs_dir), failpoint="ATOMIC_WRITE_AFTER_FSYNC_BEFORE_RENAME"
        )

        assert result.returncode == 42, result.stderr.decode()
        assert list(logs_dir.glob("*.json")) == []
        assert cleanup_orphan_temp_files(logs_dir) == 1

    def test_without_failpoint_publishes_artifact(self, tmp_path):
        logs_dir = tmp_path / "logs"

        result = run_script(AUDIT_SCRIPT, str(logs_dir))

        assert result.returncode == 0, result.stderr.decode()
        assert result.stdout.decode().strip().startswith("logs/onboarded_users_")
        assert len(list(logs_dir.glob("onboarded_users_*.json"))) == 1


class TestFailpointGate:
    """The failpoint system is a no-op unless explicitly enabled."""

    def test_disabled_by_default(self, monkeypatch):
        monkeypatch.delenv("ONBOARD_ENABLE_FAILPOINTS", raising=False)
        monkeypatch.setenv("ONBOARD_FAILPOINT", "ATOMIC_WRITE_AFTER_TMP_WRITE")

        maybe_fail("ATOMIC_WRITE_AFTER_TMP_WRITE")

        assert is_failpoint_enabled() is False
        assert get_active_failpoint() is None

    def test_active_failpoint_prefix_normalized(self, monkeypatch):
        monkeypatch.setenv("ONBOARD_ENABLE_FAILPOINTS", "1")
        monkeypatch.setenv("ONBOARD_FAILPOINT", "failpoint_atomic_write_after_rename")

        assert get_active_failpoint() == "ATOMIC_WRITE_AFTER_RENAME"

    def test_other_failpoint_does_not_trigger(self, monkeypatch):
        monkeypatch.setenv("ONBOARD_ENABLE_FAILPOINTS", "1")
        monkeypatch.setenv("ONBOARD_FAILPOINT", "ATOMIC_WRITE_AFTER_RENAME")

        maybe_fail("ATOMIC_WRITE_AFTER_TMP_WRITE")
