"""File discovery utilities: supported sources, ignore rules and project roots."""

import fnmatch
import logging
from pathlib import Path
from typing import Iterator, Optional, Sequence, Set, Tuple

from .errors import InputNotFoundError, UnsupportedFileError

logger = logging.getLogger(__name__)


# Probe order matters: the resolver tries extensions in this order.
ALLOWED_EXTENSIONS = (".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx")

IGNORE_PATTERNS = (
    ".git/**",
    ".idea/**",
    ".vscode/**",
    "*.bundle.js",
    "*.log",
    "*.min.js",
    "*.temp",
    "*.tmp",
    "build/**",
    "coverage/**",
    "dist/**",
    "node_modules/**",
)

# Files or directories whose presence marks a project root.
ROOT_MARKERS = ("package.json", "tsconfig.json", "jsconfig.json", ".git")


def split_ignore_patterns(ignore_patterns: Sequence[str]) -> Tuple[Set[str], Set[str]]:
    """
    Split ignore globs into directory names and file-name globs.

    ``build/**`` excludes every directory named ``build``; anything else is
    matched against file names.
    """
    dirs: Set[str] = set()
    files: Set[str] = set()
    for pattern in ignore_patterns:
        if pattern.endswith("/**"):
            dirs.add(pattern[:-3].rstrip("/"))
        else:
            files.add(pattern)
    return dirs, files


def iter_files(
    root: Path,
    include_ext: Optional[Sequence[str]] = None,
    ignore_patterns: Optional[Sequence[str]] = None,
    max_depth: Optional[int] = None,
) -> Iterator[Path]:
    """
    Iterate over source files in a directory tree.

    Args:
        root: Root directory to scan.
        include_ext: File extensions to include. Defaults to ALLOWED_EXTENSIONS.
        ignore_patterns: Globs to skip. Defaults to IGNORE_PATTERNS.
        max_depth: Maximum depth to descend. None means unlimited.

    Yields:
        Path objects for matching files, in sorted order.
    """
    if include_ext is None:
        include_ext = ALLOWED_EXTENSIONS
    if ignore_patterns is None:
        ignore_patterns = IGNORE_PATTERNS

    extensions = {ext.lower() for ext in include_ext}
    exclude_dirs, exclude_files = split_ignore_patterns(ignore_patterns)
    root = root.resolve()

    def _walk(current: Path, depth: int) -> Iterator[Path]:
        if max_depth is not None and depth > max_depth:
            return

        try:
            entries = sorted(current.iterdir())
        except PermissionError:
            logger.debug("Skipping unreadable directory %s", current)
            return

        for entry in entries:
            if entry.is_dir():
                if any(fnmatch.fnmatch(entry.name, pat) for pat in exclude_dirs):
                    continue
                yield from _walk(entry, depth + 1)
            elif entry.is_file():
                if entry.suffix.lower() not in extensions:
                    continue
                if any(fnmatch.fnmatch(entry.name, pat) for pat in exclude_files):
                    continue
                yield entry

    yield from _walk(root, 0)


def find_project_root(start: Path, markers: Sequence[str] = ROOT_MARKERS) -> Optional[Path]:
    """
    Find the nearest ancestor directory containing a project marker.

    Args:
        start: A file or directory inside the project.
        markers: File or directory names that mark a project root.

    Returns:
        The project root, or None if no ancestor has a marker.
    """
    start = start.resolve()
    current = start if start.is_dir() else start.parent
    for directory in (current, *current.parents):
        if any((directory / marker).exists() for marker in markers):
            return directory
    return None


def validate_file_path(
    file_path: Path,
    extensions: Sequence[str] = ALLOWED_EXTENSIONS,
) -> Path:
    """
    Resolve a file path and check that it exists with a supported extension.

    Raises:
        InputNotFoundError: The file does not exist.
        UnsupportedFileError: The extension is not in ``extensions``.
    """
    resolved = Path(file_path).resolve()
    if not resolved.is_file():
        raise InputNotFoundError(f'File not found "{file_path}"')
    if resolved.suffix.lower() not in {ext.lower() for ext in extensions}:
        raise UnsupportedFileError(
            f'Unsupported file type "{resolved.suffix}". '
            f"Supported extensions: {', '.join(extensions)}"
        )
    return resolved


def is_within_root(path: Path, root: Path) -> bool:
    """Check if a path is within the project root."""
    try:
        path.resolve().relative_to(root.resolve())
        return True
    except ValueError:
        return False


def get_relative_path(file_path: Path, root: Path) -> Path:
    """Get the path relative to root, handling edge cases."""
    try:
        return file_path.resolve().relative_to(root.resolve())
    except ValueError:
        return file_path
