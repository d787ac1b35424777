"""
Text-search engines used by the reference finder.

The finder only depends on the ``SearchEngine`` protocol, so tests (or
callers without ripgrep) can swap in another implementation.
"""

import logging
import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import List, NamedTuple, Optional, Protocol, Sequence

from .discovery import iter_files
from .errors import SearchError, SearchUnavailableError

logger = logging.getLogger(__name__)


class SearchMatch(NamedTuple):
    """One matching line."""

    path: Path
    line_number: int
    text: str


class SearchEngine(Protocol):
    """Protocol for line-oriented, case-insensitive regex search."""

    def is_available(self) -> bool:
        """Return True if the engine can be invoked."""
        ...

    def search(
        self,
        root: Path,
        pattern: str,
        extensions: Sequence[str],
        ignore_patterns: Sequence[str],
    ) -> List[SearchMatch]:
        """Return every line under *root* matching *pattern*."""
        ...


def extension_glob(extensions: Sequence[str]) -> str:
    """Build a ``*.{js,ts}`` style glob from dotted extensions."""
    names = ",".join(ext.lstrip(".") for ext in extensions)
    return f"*.{{{names}}}"


class RipgrepSearch:
    """Run the ``rg`` executable once per pattern."""

    # rg exits 0 when something matched and 1 when nothing did.
    OK_EXIT_CODES = (0, 1)

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None):
        self._binary = binary
        self.timeout = timeout

    @property
    def binary(self) -> Optional[str]:
        if self._binary:
            path = Path(self._binary)
            if path.is_file() and os.access(path, os.X_OK):
                return self._binary
            return shutil.which(self._binary)
        return shutil.which("rg")

    def is_available(self) -> bool:
        return self.binary is not None

    def build_args(
        self,
        root: Path,
        pattern: str,
        extensions: Sequence[str],
        ignore_patterns: Sequence[str],
    ) -> List[str]:
        args = [
            self.binary or "rg",
            "--glob", extension_glob(extensions),
            "--ignore-case",
            "--line-number",
            "--no-heading",
            "--with-filename",
            "--null",
            "--color", "never",
        ]
        for ignore in ignore_patterns:
            args.extend(["--glob", f"!{ignore}"])
        args.extend(["-e", pattern, str(root)])
        return args

    def search(
        self,
        root: Path,
        pattern: str,
        extensions: Sequence[str],
        ignore_patterns: Sequence[str],
    ) -> List[SearchMatch]:
        binary = self.binary
        if binary is None:
            raise SearchUnavailableError("ripgrep (rg) not found on PATH")

        args = self.build_args(root, pattern, extensions, ignore_patterns)
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                # rg passes matched lines through as raw bytes
                encoding="utf-8",
                errors="replace",
                cwd=str(root),
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise SearchError(f"ripgrep timed out after {e.timeout}s") from e
        except OSError as e:
            raise SearchUnavailableError(f"Could not run ripgrep: {e}") from e

        if result.returncode not in self.OK_EXIT_CODES:
            raise SearchError(
                f"ripgrep exited with code {result.returncode}: "
                f"{result.stderr.strip() if result.stderr else 'unknown error'}"
            )
        return parse_ripgrep_output(result.stdout, root)


def parse_ripgrep_output(output: str, root: Path) -> List[SearchMatch]:
    """
    Parse ``path NUL line:text`` records produced by ``rg --null``.

    Relative paths are taken relative to *root*.
    """
    matches: List[SearchMatch] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        path_str, sep, rest = line.partition("\0")
        if not sep:
            continue
        line_no, sep, text = rest.partition(":")
        if not sep or not line_no.isdigit():
            continue
        path = Path(path_str)
        if not path.is_absolute():
            path = root / path
        matches.append(SearchMatch(path, int(line_no), text))
    return matches


class WalkSearch:
    """Pure-Python engine: walk the tree and match each line with ``re``."""

    def is_available(self) -> bool:
        return True

    def search(
        self,
        root: Path,
        pattern: str,
        extensions: Sequence[str],
        ignore_patterns: Sequence[str],
    ) -> List[SearchMatch]:
        try:
            regex = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise SearchError(f"Invalid pattern {pattern!r}: {e}") from e

        matches: List[SearchMatch] = []
        for file_path in iter_files(root, extensions, ignore_patterns):
            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Skipping %s: %s", file_path, e)
                continue
            for number, line in enumerate(content.splitlines(), start=1):
                if regex.search(line):
                    matches.append(SearchMatch(file_path, number, line))
        return matches


def get_engine(name: str = "ripgrep", binary: Optional[str] = None) -> SearchEngine:
    """Create a search engine by name (``ripgrep`` or ``python``)."""
    if name == "ripgrep":
        return RipgrepSearch(binary)
    if name == "python":
        return WalkSearch()
    raise ValueError(f"Unknown search engine: {name}")
