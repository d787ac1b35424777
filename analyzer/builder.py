"""Pipeline that orchestrates extraction, search, resolution and correlation."""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from graph.model import DependencyGraph, ReferenceRecord, SymbolDescriptor
from .config import Settings, load_settings
from .correlator import correlate, is_reexport_chain
from .discovery import find_project_root, validate_file_path
from .errors import NoExportsError, ProjectRootNotFoundError
from .exports import extract_exports
from .finder import find_references
from .resolver import resolve_references
from .search import RipgrepSearch, SearchEngine

logger = logging.getLogger(__name__)


def _prepare(
    file_path: Path,
    root: Optional[Path],
    settings: Optional[Settings],
) -> Tuple[Path, Path, Settings, List[SymbolDescriptor]]:
    """Validate inputs and extract the export table."""
    file_path = validate_file_path(file_path, (settings or Settings()).extensions)

    if root is None:
        root = find_project_root(file_path)
        if root is None:
            raise ProjectRootNotFoundError(f"Project root not found for {file_path}")
    root = Path(root).resolve()
    logger.debug("Project root: %s", root)

    if settings is None:
        settings = load_settings(root)
    logger.debug("Aliases: %s", [(a.pattern, a.target_dir) for a in settings.aliases])

    exports = extract_exports(file_path)
    if not exports:
        raise NoExportsError(f"No exports found in {file_path}")
    logger.debug("Exports: %s", [(s.name, s.kind) for s in exports])

    return file_path, root, settings, exports


def _collect_records(
    file_path: Path,
    root: Path,
    settings: Settings,
    exports: Sequence[SymbolDescriptor],
    engine: Optional[SearchEngine],
) -> List[ReferenceRecord]:
    if engine is None:
        engine = RipgrepSearch(settings.ripgrep)

    candidates = find_references(
        root,
        exports,
        engine,
        source_file=file_path,
        extensions=settings.extensions,
        ignore_patterns=settings.ignore_patterns,
    )
    return resolve_references(root, settings.aliases, candidates, settings.extensions)


def analyze_file(
    file_path: Path,
    *,
    root: Optional[Path] = None,
    settings: Optional[Settings] = None,
    engine: Optional[SearchEngine] = None,
) -> DependencyGraph:
    """
    Find and classify every consumer of a file's exports.

    Args:
        file_path: The file to analyze.
        root: Project root (default: nearest ancestor with a project marker).
        settings: Run settings (default: loaded from the project root).
        engine: Search engine (default: ripgrep).

    Returns:
        The dependency graph. Zero connections is a valid result.

    Raises:
        InputNotFoundError: The file or its project root is missing.
        UnsupportedFileError: The file type is not analyzable.
        NoExportsError: The file exports nothing.
    """
    file_path, root, settings, exports = _prepare(file_path, root, settings)
    records = _collect_records(file_path, root, settings, exports, engine)
    graph = correlate(file_path, exports, records, root=root, aliases=settings.aliases)
    logger.info(
        "%s: %d exports, %d connections",
        file_path.name, len(graph.exports), len(graph.connections),
    )
    return graph


def find_related_files(
    file_path: Path,
    *,
    root: Optional[Path] = None,
    settings: Optional[Settings] = None,
    engine: Optional[SearchEngine] = None,
) -> List[Path]:
    """
    List files that import the analyzed file, directly or through a relay.

    Names are not correlated against the export table, so files importing
    from a relay are included even when they use other re-exported names.

    Returns:
        Sorted, unique consumer paths.
    """
    file_path, root, settings, exports = _prepare(file_path, root, settings)
    records = _collect_records(file_path, root, settings, exports, engine)

    related = set()
    relays = {}
    for record in records:
        target = record.resolved_target
        if target is None or record.consumer_file == file_path:
            continue
        if target == file_path:
            related.add(record.consumer_file)
            continue
        if target not in relays:
            relays[target] = is_reexport_chain(
                file_path, target, records, root=root, aliases=settings.aliases
            )
        if relays[target]:
            related.add(record.consumer_file)

    return sorted(related)
