"""Project-wide search for files that may consume a file's exports."""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from graph.model import DEFAULT, PROPERTY, ReferenceCandidate, SymbolDescriptor
from .discovery import ALLOWED_EXTENSIONS, IGNORE_PATTERNS
from .errors import SearchError
from .search import RipgrepSearch, SearchEngine

logger = logging.getLogger(__name__)


def _word(name: str) -> str:
    """Escape *name* and anchor it on word boundaries where ``\\b`` applies."""
    escaped = re.escape(name)
    prefix = r"\b" if re.match(r"\w", name[0]) else ""
    suffix = r"\b" if re.match(r"\w", name[-1]) else ""
    return f"{prefix}{escaped}{suffix}"


def symbol_patterns(symbol: SymbolDescriptor) -> List[str]:
    """
    Build the search patterns a consumer of *symbol* could match.

    Patterns are kept to the regex subset shared by ripgrep and ``re``.
    """
    n = _word(symbol.name)
    patterns = [
        # import type { Name } from
        rf"import\s+type\s*\{{[^}}]*{n}[^}}]*\}}",
        # { Name as Local }
        rf"{n}\s+as\s+[\w$]+",
        # import Name from
        rf"import\s+{n}\s+from",
        # const { Name } = require(
        rf"\{{[^}}]*{n}[^}}]*\}}\s*=\s*require\s*\(",
        # import { Name } from
        rf"import\s*\{{[^}}]*{n}[^}}]*\}}\s*from",
        # import * as Name from
        rf"import\s*\*\s*as\s+{n}\s+from",
        # const Name = require(
        rf"(?:const|let|var)\s+{n}\s*=\s*require\s*\(",
        # import Default, { Name } from / import Name, { ... } from
        rf"import\s+[\w$]+\s*,\s*\{{[^}}]*{n}[^}}]*\}}\s*from",
        rf"import\s+{n}\s*,\s*\{{",
    ]

    if symbol.kind == PROPERTY:
        patterns.append(rf"require\s*\(\s*['\"]\.\.?/[^'\"]*['\"]\s*\)\s*\.\s*{n}")

    return patterns


def module_name(source_file: Path) -> str:
    """Name consumers use for a module; ``dir/index.ts`` is imported as ``dir``."""
    if source_file.stem == "index":
        return source_file.parent.name
    return source_file.stem


def module_patterns(source_file: Path) -> List[str]:
    """Patterns matching any import or require of *source_file* by module name."""
    s = re.escape(module_name(source_file))
    return [
        rf"from\s*['\"][^'\"]*\b{s}(?:\.[\w]+)?['\"]",
        rf"require\s*\(\s*['\"][^'\"]*\b{s}(?:\.[\w]+)?['\"]\s*\)",
    ]


def default_patterns(source_file: Path) -> List[str]:
    """Default imports of *source_file* under any local name."""
    stem = re.escape(module_name(source_file))
    return [
        rf"import\s+[\w$]+\s*(?:,\s*\{{[^}}]*\}}\s*)?from\s*['\"][^'\"]*\b{stem}(?:\.[\w]+)?['\"]",
        rf"(?:const|let|var)\s+[\w$]+\s*=\s*require\s*\(\s*['\"][^'\"]*\b{stem}(?:\.[\w]+)?['\"]",
    ]


def build_patterns(
    exports: Sequence[SymbolDescriptor],
    source_file: Optional[Path] = None,
) -> List[str]:
    """
    Build the deduplicated pattern list for a whole export table.

    Args:
        exports: Symbols exported by the analyzed file.
        source_file: The analyzed file; enables module-name patterns.

    Returns:
        Patterns in generation order.
    """
    patterns: Dict[str, None] = {}
    for symbol in exports:
        for pattern in symbol_patterns(symbol):
            patterns.setdefault(pattern, None)
        if symbol.kind == DEFAULT and source_file is not None:
            for pattern in default_patterns(source_file):
                patterns.setdefault(pattern, None)

    if source_file is not None:
        for pattern in module_patterns(source_file):
            patterns.setdefault(pattern, None)

    return list(patterns)


def find_references(
    root: Path,
    exports: Sequence[SymbolDescriptor],
    engine: Optional[SearchEngine] = None,
    *,
    source_file: Optional[Path] = None,
    extensions: Sequence[str] = ALLOWED_EXTENSIONS,
    ignore_patterns: Sequence[str] = IGNORE_PATTERNS,
) -> List[ReferenceCandidate]:
    """
    Search the project for files that may reference the given exports.

    Each pattern is searched separately and results are merged per file.
    A pattern whose search fails contributes nothing; an unavailable
    engine or an empty export list yields an empty result.

    Args:
        root: Project root directory.
        exports: Symbols exported by the analyzed file.
        engine: Search engine to use (default: ripgrep).
        source_file: The analyzed file, used for module-name patterns.
        extensions: File extensions to search.
        ignore_patterns: Globs to exclude from the search.

    Returns:
        One candidate per file, sorted by filename, with matched lines in
        line order and exact duplicates removed.
    """
    if not exports:
        logger.debug("No exports given, skipping search")
        return []

    if engine is None:
        engine = RipgrepSearch()
    if not engine.is_available():
        logger.warning("Search engine %s is not available", type(engine).__name__)
        return []

    root = Path(root).resolve()
    patterns = build_patterns(exports, source_file)
    logger.debug("Searching %s with %d patterns", root, len(patterns))

    # file -> {line text: first line number}
    found: Dict[Path, Dict[str, int]] = {}
    for pattern in patterns:
        try:
            matches = engine.search(root, pattern, extensions, ignore_patterns)
        except SearchError as e:
            logger.warning("Search failed for pattern %r: %s", pattern, e)
            continue

        for match in matches:
            lines = found.setdefault(match.path.resolve(), {})
            text = match.text.rstrip("\r\n")
            if text not in lines or match.line_number < lines[text]:
                lines[text] = match.line_number

    candidates: List[ReferenceCandidate] = []
    for filename in sorted(found):
        ordered: List[Tuple[int, str]] = sorted(
            (number, text) for text, number in found[filename].items()
        )
        candidates.append(
            ReferenceCandidate(filename, "\n".join(text for _, text in ordered))
        )

    logger.debug("Found %d candidate files", len(candidates))
    return candidates
