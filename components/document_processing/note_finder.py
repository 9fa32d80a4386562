"""Enumeration of markdown notes under the brain directory."""

import logging
import os
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

NOTE_EXTENSION = ".md"


class NoteDirectoryError(Exception):
    """Raised when the notes root directory is missing or not a directory."""


def is_note_file(file_path: Union[str, Path]) -> bool:
    """Check whether a path names a markdown note."""
    return str(file_path).endswith(NOTE_EXTENSION)


def find_markdown_files(root_dir: Union[str, Path]) -> List[str]:
    """
    Recursively collect the absolute paths of all markdown notes under a directory.

    Subdirectories that cannot be read are logged and skipped; the walk
    continues with the remaining tree. Symlinked notes are not followed.

    Args:
        root_dir: The directory to search.

    Returns:
        Absolute note paths, in sorted order within each directory.

    Raises:
        NoteDirectoryError: If the root directory does not exist.
    """
    root = Path(root_dir).expanduser()
    if not root.is_dir():
        raise NoteDirectoryError(f"Brain directory not found: {root}")

    def _on_error(error: OSError) -> None:
        logger.warning(f"Cannot read directory {error.filename}: {error.strerror}")

    files: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root.resolve(), onerror=_on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            file_path = Path(dirpath) / filename
            if (
                is_note_file(filename)
                and file_path.is_file()
                and not file_path.is_symlink()
            ):
                files.append(str(file_path))

    logger.debug(f"Found {len(files)} markdown files under {root}")
    return files
