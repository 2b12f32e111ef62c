"""Employee Onboarding - Atomic I/O utilities.

Implements the atomic publish rule for persisted documents:
1. Write to temp path in same directory
2. Flush + best-effort fsync
3. Rename temp -> final (the publish boundary)

This ensures that the final path either contains complete valid data
or does not exist. Partial writes only affect the temp file.

Audit artifacts use an exclusive variant: the publish step is a hard link
that fails if the final path already exists, so a prior artifact is never
overwritten. Filesystems without hard links fall back to an O_EXCL create.

Failpoints (resilience tests):
- ATOMIC_WRITE_AFTER_TMP_WRITE: After writing to temp file, before fsync
- ATOMIC_WRITE_AFTER_FSYNC_BEFORE_RENAME: After fsync, before atomic rename
- ATOMIC_WRITE_AFTER_RENAME: After atomic rename completes
"""

import errno
import os
import uuid
from pathlib import Path

from onboard.utils.failpoints import maybe_fail

# link() errors meaning "no hard links on this filesystem"
_LINK_UNSUPPORTED = frozenset({errno.EPERM, errno.ENOTSUP, errno.EOPNOTSUPP})


def _write_all(fd: int, data: bytes) -> None:
    """Write all bytes to a file descriptor, handling partial writes.

    Loops until all bytes are written, handling short writes and EINTR.

    Args:
        fd: File descriptor to write to.
        data: Bytes to write.

    Raises:
        OSError: If write fails or returns 0 bytes unexpectedly.
    """
    total_written = 0
    data_len = len(data)

    while total_written < data_len:
        try:
            written = os.write(fd, data[total_written:])
            if written == 0:
                raise OSError("os.write() returned 0 bytes unexpectedly")
            total_written += written
        except InterruptedError:
            continue


def _write_temp(temp_path: Path, data: bytes) -> None:
    """Write data to temp_path and fsync it, removing the temp file on failure."""
    fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
    try:
        _write_all(fd, data)

        # Failpoint: after temp write, before fsync
        maybe_fail("ATOMIC_WRITE_AFTER_TMP_WRITE")

        os.fsync(fd)
    except OSError:
        os.close(fd)
        try:
            os.remove(temp_path)
        except OSError:
            pass  # Best-effort cleanup
        raise
    else:
        os.close(fd)


def atomic_write_bytes(
    final_path: str | Path,
    data: bytes,
    temp_suffix: str = ".tmp",
) -> None:
    """Atomically write bytes to a file, replacing any existing content.

    Idempotent: safe to call even if temp file exists (overwrites temp).
    Never corrupts final path - atomic rename ensures all-or-nothing.

    Args:
        final_path: The target path for the final file.
        data: Bytes to write.
        temp_suffix: Suffix for the temporary file (default: ".tmp").

    Raises:
        OSError: If directory creation, write, or rename fails.
    """
    final_path = Path(final_path)
    temp_path = final_path.with_suffix(final_path.suffix + temp_suffix)

    final_path.parent.mkdir(parents=True, exist_ok=True)

    _write_temp(temp_path, data)

    # Failpoint: after fsync, before rename
    maybe_fail("ATOMIC_WRITE_AFTER_FSYNC_BEFORE_RENAME")

    # Atomic rename (POSIX guarantees atomicity)
    os.replace(temp_path, final_path)

    # Best-effort fsync on directory for rename durability
    _fsync_directory(final_path.parent)

    # Failpoint: after rename (for verifying completed writes)
    maybe_fail("ATOMIC_WRITE_AFTER_RENAME")


def atomic_write_text(
    final_path: str | Path,
    text: str,
    encoding: str = "utf-8",
    temp_suffix: str = ".tmp",
) -> None:
    """Atomically write text to a file, replacing any existing content.

    Args:
        final_path: The target path for the final file.
        text: Text string to write.
        encoding: Text encoding (default: utf-8).
        temp_suffix: Suffix for the temporary file (default: ".tmp").

    Raises:
        OSError: If directory creation, write, or rename fails.
    """
    atomic_write_bytes(final_path, text.encode(encoding), temp_suffix)


def _create_exclusive(final_path: Path, data: bytes) -> None:
    """Write data to a new file opened with O_EXCL, removing it on failure.

    Used where hard links are unsupported. Exclusive, but a crash mid-write
    can leave a partial final file.
    """
    fd = os.open(final_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
    try:
        _write_all(fd, data)
        os.fsync(fd)
    except OSError:
        os.close(fd)
        try:
            os.remove(final_path)
        except OSError:
            pass  # Best-effort cleanup
        raise
    else:
        os.close(fd)


def atomic_create_text(
    final_path: str | Path,
    text: str,
    encoding: str = "utf-8",
    temp_suffix: str = ".tmp",
) -> None:
    """Atomically publish text to a NEW file; never replaces an existing one.

    The temp file carries a random component so concurrent creators of the
    same final path do not share a temp file. Publishing is a hard link,
    which fails if final_path already exists. On filesystems without hard
    link support (EPERM/ENOTSUP from link) the file is created directly with
    O_EXCL instead.

    Args:
        final_path: The target path for the final file.
        text: Text string to write.
        encoding: Text encoding (default: utf-8).
        temp_suffix: Suffix for the temporary file (default: ".tmp").

    Raises:
        FileExistsError: If final_path already exists (temp is removed).
        OSError: If directory creation, write, or link fails.
    """
    final_path = Path(final_path)
    temp_path = final_path.with_name(f"{final_path.name}.{uuid.uuid4().hex}{temp_suffix}")
    data = text.encode(encoding)

    final_path.parent.mkdir(parents=True, exist_ok=True)

    _write_temp(temp_path, data)

    maybe_fail("ATOMIC_WRITE_AFTER_FSYNC_BEFORE_RENAME")

    try:
        os.link(temp_path, final_path)
    except OSError as e:
        if e.errno not in _LINK_UNSUPPORTED:
            raise
        _create_exclusive(final_path, data)
    finally:
        try:
            os.remove(temp_path)
        except OSError:
            pass  # Best-effort cleanup

    _fsync_directory(final_path.parent)

    maybe_fail("ATOMIC_WRITE_AFTER_RENAME")


def _fsync_directory(dir_path: Path) -> None:
    """Best-effort fsync on a directory.

    Silently ignores errors as this is best-effort.

    Args:
        dir_path: Directory path to sync.
    """
    try:
        fd = os.open(dir_path, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except (OSError, AttributeError):
        # O_DIRECTORY may not be available on all platforms
        pass


def cleanup_orphan_temp_files(directory: str | Path, temp_suffix: str = ".tmp") -> int:
    """Clean up orphan temp files in a directory.

    Called during startup to remove incomplete writes.

    Args:
        directory: Directory to scan for temp files.
        temp_suffix: Suffix pattern to match (default: ".tmp").

    Returns:
        Number of files removed.
    """
    directory = Path(directory)
    removed = 0

    if not directory.exists():
        return 0

    for temp_file in directory.glob(f"*{temp_suffix}"):
        try:
            temp_file.unlink()
            removed += 1
        except OSError:
            pass  # Best-effort cleanup

    return removed
