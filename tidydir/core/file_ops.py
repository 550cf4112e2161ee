"""
tidydir Core: Filesystem Operations.

Directory listing, entry classification and the move primitive shared by the
scanner, the resolver and the executor.
"""
import errno
import os
import shutil
from typing import List

from tidydir.core.constants import EntryKind, ErrorCode
from tidydir.core.errors import PathAccessError


def entry_kind(entry: os.DirEntry) -> EntryKind:
    """Classify a directory entry, following symlinks.

    Anything that is not a directory (regular files, broken symlinks,
    sockets...) is treated as a file.
    """
    try:
        return EntryKind.DIRECTORY if entry.is_dir() else EntryKind.FILE
    except OSError:
        return EntryKind.FILE


def list_dir(path: str) -> List[os.DirEntry]:
    """List the immediate children of a directory in filesystem order.

    Args:
        path: Directory to list

    Returns:
        Directory entries

    Raises:
        PathAccessError: If the path is missing, not a directory, or unreadable
    """
    if not os.path.exists(path):
        raise PathAccessError("Directory does not exist", path, ErrorCode.NOT_FOUND)

    if not os.path.isdir(path):
        raise PathAccessError("Path is not a directory", path, ErrorCode.NOT_A_DIRECTORY)

    try:
        with os.scandir(path) as it:
            return list(it)
    except PermissionError as e:
        raise PathAccessError(f"Permission denied: {e.strerror}", path, ErrorCode.PERMISSION_DENIED)
    except OSError as e:
        raise PathAccessError(f"Cannot read directory: {e.strerror or e}", path, ErrorCode.INTERNAL_ERROR)


def move_path(source: str, destination: str) -> None:
    """Move a file or directory, replacing an existing destination file.

    Uses an atomic rename on the same filesystem and falls back to
    copy-then-delete when the rename crosses devices.

    Raises:
        OSError: If the move fails
    """
    try:
        os.replace(source, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        # shutil.move would nest the source inside an existing directory
        if os.path.isdir(destination) and not os.path.islink(destination):
            raise IsADirectoryError(errno.EISDIR, "Destination is an existing directory", destination)
        shutil.move(source, destination)
