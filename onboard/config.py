"""Employee Onboarding - Configuration constants.

Minimal configuration. No external config libraries.
All paths are relative to the repository root by default and can be
redirected with environment variables (used by deployments and tests).
"""

import os
from pathlib import Path

# Repository root (parent of onboard/)
REPO_ROOT = Path(__file__).parent.parent.resolve()


def _get_dir(env_name: str, default: Path) -> Path:
    """Get a directory path from environment or use default.

    Args:
        env_name: Environment variable holding an override path.
        default: Path used when the variable is unset or empty.

    Returns:
        Resolved directory path (not created).
    """
    env_val = os.environ.get(env_name)
    if env_val:
        return Path(env_val).expanduser().resolve()
    return default


def _get_store_backend() -> str:
    """Get the document store backend name.

    Environment variable ONBOARD_STORE_BACKEND selects "json" (default)
    or "sqlite". Unknown values fall back to "json".

    Returns:
        Backend name.
    """
    env_val = os.environ.get("ONBOARD_STORE_BACKEND", "").strip().lower()
    if env_val in STORE_BACKENDS:
        return env_val
    return "json"


# Data directory (document store + upload spool)
DATA_DIR = _get_dir("ONBOARD_DATA_DIR", REPO_ROOT / "data")
UPLOADS_DIR = DATA_DIR / "uploads"

# Logs directory (audit artifacts of onboarded batches)
LOGS_DIR = _get_dir("ONBOARD_LOGS_DIR", REPO_ROOT / "logs")

# Document store locations
JSON_DB_PATH = DATA_DIR / "db.json"
SQLITE_DB_PATH = DATA_DIR / "onboard.db"

STORE_BACKENDS = ("json", "sqlite")
STORE_BACKEND = _get_store_backend()

# Single logical collection held by the document store
USERS_COLLECTION = "users"

# CSV field contract
EMPLOYEE_ID_FIELD = "Employee Id"
FIRST_NAME_FIELD = "First Name"
LAST_NAME_FIELD = "Last Name"
EMAIL_FIELD = "Email Address"
CSV_HEADER = (EMPLOYEE_ID_FIELD, FIRST_NAME_FIELD, LAST_NAME_FIELD, EMAIL_FIELD)

# Audit artifact naming: onboarded_users_<timestamp-id>.json
AUDIT_FILE_PREFIX = "onboarded_users_"
AUDIT_FILE_SUFFIX = ".json"
