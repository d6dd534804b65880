"""Depth-limited directory walk.

Symlink cycles are avoided with an explicit set of resolved directory paths
passed down the recursion. Only files under the root are ever returned.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from filesift import constants
from filesift.models import ScanError
from filesift.scanning.file_filter import FileFilter

logger = logging.getLogger(__name__)


@dataclass
class WalkResult:
    """Candidate files found under a root.

    Attributes:
        root: Resolved scan root.
        paths: Candidate files in walk order (entries sorted per directory).
        total_size: Sum of candidate file sizes in bytes.
        filtered: Files rejected by the filter.
        errors: Entries that could not be inspected.
    """

    root: Path
    paths: list[Path] = field(default_factory=list)
    total_size: int = 0
    filtered: int = 0
    errors: list[ScanError] = field(default_factory=list)


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def _walk(
    current: Path,
    depth: int,
    visited: set[Path],
    result: WalkResult,
    file_filter: FileFilter,
    max_depth: int,
    follow_symlinks: bool,
) -> None:
    rel = current.relative_to(result.root).as_posix() if current != result.root else ""

    try:
        is_link = current.is_symlink()
        resolved = current.resolve()
        is_dir = resolved.is_dir()
    except OSError as e:
        result.errors.append(ScanError(path=str(current), error=str(e)))
        return

    if is_link:
        if not follow_symlinks:
            logger.debug(f"Not following symlink {current}")
            return
        if not _is_within(resolved, result.root):
            logger.debug(f"Symlink {current} points outside the root")
            return

    if is_dir:
        if depth > max_depth:
            return
        if rel and file_filter.is_excluded(rel, is_dir=True):
            return
        if resolved in visited:
            logger.debug(f"Already visited {resolved}, skipping {current}")
            return
        visited.add(resolved)

        try:
            entries = sorted(os.scandir(current), key=lambda e: e.name)
        except OSError as e:
            result.errors.append(ScanError(path=str(current), error=str(e)))
            return

        for entry in entries:
            _walk(
                current / entry.name,
                depth + 1,
                visited,
                result,
                file_filter,
                max_depth,
                follow_symlinks,
            )
        return

    if not resolved.is_file():
        return

    if not file_filter.should_include(rel):
        result.filtered += 1
        return

    try:
        size = resolved.stat().st_size
    except OSError as e:
        result.errors.append(ScanError(path=str(current), error=str(e)))
        return

    result.paths.append(current)
    result.total_size += size


def scan_directory(
    root: str | Path,
    file_filter: FileFilter | None = None,
    max_depth: int = constants.MAX_DEPTH,
    follow_symlinks: bool = False,
    visited: set[Path] | None = None,
) -> WalkResult:
    """Collect candidate files under ``root``.

    Args:
        root: Directory to walk.
        file_filter: Filter for candidate files. Defaults to a FileFilter on root.
        max_depth: Deepest directory level descended into (root is 0).
        follow_symlinks: Follow symlinks that stay inside the root.
        visited: Resolved directories already walked. Pass a set to share
            cycle tracking across several walks.

    Returns:
        WalkResult with candidate paths and per-entry errors.

    Raises:
        NotADirectoryError: If root is not a directory.
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    if file_filter is None:
        file_filter = FileFilter(root)
    if visited is None:
        visited = set()

    result = WalkResult(root=root)
    _walk(root, 0, visited, result, file_filter, max_depth, follow_symlinks)
    logger.info(
        f"Found {len(result.paths)} files under {root} "
        f"({result.filtered} filtered, {len(result.errors)} errors)"
    )
    return result
