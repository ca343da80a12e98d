"""Source file collection for feature documentation.

Walks a feature's directory tree and selects the code files that are
bundled into the analysis prompt.
"""

import logging
from pathlib import Path
from typing import Iterable, Union

from src.parsers.structure import FileRecord

logger = logging.getLogger(__name__)


def collect_code_files(
    root: Union[str, Path],
    extensions: Iterable[str],
    exclude_dirs: Iterable[str],
) -> list[Path]:
    """Collect all code files under a directory.

    Directories named in ``exclude_dirs`` are never entered. Entries are
    visited in sorted order so repeated runs select the same files.

    Args:
        root: Directory to scan.
        extensions: Allowed file suffixes, including the leading dot.
        exclude_dirs: Directory names to skip at any depth.

    Returns:
        List of matching file paths.

    Raises:
        FileNotFoundError: If the root directory does not exist.
        NotADirectoryError: If the root is not a directory.
    """
    root_path = Path(root)
    if not root_path.exists():
        raise FileNotFoundError(f"Feature path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Feature path is not a directory: {root}")

    files: list[Path] = []
    _walk(root_path, frozenset(extensions), frozenset(exclude_dirs), files)
    logger.debug("Collected %d files under %s", len(files), root_path)
    return files


def _walk(
    directory: Path,
    extensions: frozenset[str],
    exclude_dirs: frozenset[str],
    files: list[Path],
) -> None:
    """Recursively accumulate matching files below a directory.

    Args:
        directory: Current directory to walk.
        extensions: Allowed file suffixes.
        exclude_dirs: Directory names to skip.
        files: Accumulator for matching paths.
    """
    for entry in sorted(directory.iterdir(), key=lambda e: e.name):
        if entry.is_dir():
            if entry.name not in exclude_dirs:
                _walk(entry, extensions, exclude_dirs, files)
        elif entry.suffix in extensions:
            files.append(entry)


def build_file_records(
    root: Union[str, Path], files: Iterable[Path]
) -> list[FileRecord]:
    """Pair each file with its path relative to the feature root.

    Args:
        root: Feature root directory.
        files: Files located under ``root``.

    Returns:
        List of FileRecord objects in the same order as ``files``.
    """
    root_path = Path(root)
    return [
        FileRecord(path=f, name=f.relative_to(root_path).as_posix()) for f in files
    ]
