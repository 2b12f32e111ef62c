"""Employee Onboarding - Failpoint injection for resilience testing.

Provides deterministic crash injection for testing power-failure scenarios
in the document store and audit log write paths.

Safety gate: Failpoints are only active when ONBOARD_ENABLE_FAILPOINTS=1.
The default is a complete no-op.

Environment variables:
- ONBOARD_ENABLE_FAILPOINTS: Set to "1" to enable failpoint system (default: disabled)
- ONBOARD_FAILPOINT: Name of the failpoint to trigger (e.g., "ATOMIC_WRITE_AFTER_TMP_WRITE")
- ONBOARD_FAILPOINT_EXIT_CODE: Exit code to use when crashing (default: 42)

Usage:
    from onboard.utils.failpoints import maybe_fail

    maybe_fail("ATOMIC_WRITE_AFTER_TMP_WRITE")
"""

from __future__ import annotations

import os

_PREFIX = "FAILPOINT_"


def _normalize(name: str) -> str:
    name = name.upper()
    if name.startswith(_PREFIX):
        name = name[len(_PREFIX) :]
    return name


def maybe_fail(point: str) -> None:
    """Crash the process if the named failpoint is active.

    Uses os._exit() so that finally blocks and atexit handlers do not run,
    which is what a power failure looks like to the filesystem.

    Args:
        point: The failpoint name to check (with or without "FAILPOINT_" prefix).
    """
    if not is_failpoint_enabled():
        return

    target = os.environ.get("ONBOARD_FAILPOINT", "")
    if not target or _normalize(point) != _normalize(target):
        return

    try:
        exit_code = int(os.environ.get("ONBOARD_FAILPOINT_EXIT_CODE", "42"))
    except ValueError:
        exit_code = 42

    os._exit(exit_code)


def is_failpoint_enabled() -> bool:
    """Check if the failpoint system is enabled.

    Returns:
        True if ONBOARD_ENABLE_FAILPOINTS=1, False otherwise.
    """
    return os.environ.get("ONBOARD_ENABLE_FAILPOINTS") == "1"


def get_active_failpoint() -> str | None:
    """Get the currently active failpoint name, if any.

    Returns:
        The failpoint name (without FAILPOINT_ prefix) or None.
    """
    if not is_failpoint_enabled():
        return None
    target = os.environ.get("ONBOARD_FAILPOINT", "")
    return _normalize(target) if target else None
