"""
File system utilities for RuntimeKit.

This module provides the small set of file operations the layer store needs:
- Atomic writes for metadata files
- Wiping a directory's contents while keeping the directory itself
- Streaming tar extraction with leading path components stripped
"""

import shutil
import sys
import tarfile
import tempfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional, Union

from runtimekit.core.exceptions import ExecutionError, InsecureArchiveError


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Args:
        path: Path to check
        parent: Potential parent directory

    Returns:
        True if path is under parent, False otherwise
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def strip_components(name: str, count: int) -> Optional[str]:
    """
    Drop the first ``count`` components of an archive member name.

    Returns None when nothing is left, mirroring ``tar --strip-components``
    which skips such members entirely.

    Example:
        >>> strip_components("go/bin/go", 1)
        'bin/go'
        >>> strip_components("go/", 1) is None
        True
    """
    parts = [p for p in PurePosixPath(name).parts if p not in ("", ".")]
    if len(parts) <= count:
        return None
    return "/".join(parts[count:])


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never left partially written; on failure the previous
    content (if any) stays in place.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def clear_directory(path: Union[str, Path]) -> None:
    """
    Remove everything inside a directory, keeping the directory itself.

    A missing directory is created empty.

    Args:
        path: Directory to wipe

    Raises:
        OSError: If an entry cannot be removed
    """
    path = Path(path)
    if not path.exists():
        path.mkdir(parents=True)
        return

    for entry in path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_tar_stream(
    fileobj: BinaryIO,
    destination: Union[str, Path],
    strip: int = 0,
    compression: str = "gz",
) -> int:
    """
    Extract a compressed tar stream without seeking.

    Members are renamed with their first ``strip`` path components removed;
    members that become empty are skipped.

    Args:
        fileobj: Readable binary stream (e.g. an HTTP response body)
        destination: Directory to extract into
        strip: Number of leading components to drop
        compression: Stream compression ("gz", "xz", "bz2" or "" for none)

    Returns:
        Number of members written

    Raises:
        InsecureArchiveError: If a member escapes the destination
        ExecutionError: If the stream is not a readable tar archive
    """
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)
    mode = f"r|{compression}" if compression else "r|"

    written = 0
    try:
        with tarfile.open(fileobj=fileobj, mode=mode) as tar:
            for member in tar:
                name = strip_components(member.name, strip)
                if name is None:
                    continue
                member.name = name
                if member.islnk():
                    linkname = strip_components(member.linkname, strip)
                    if linkname is None:
                        continue
                    member.linkname = linkname
                _validate_archive_path(name, destination)

                if sys.version_info >= (3, 12):
                    tar.extract(member, destination, filter="data")
                else:
                    tar.extract(member, destination)
                written += 1
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ExecutionError(
            f"Failed to extract archive into {destination}: {e}"
        ) from e

    return written
