"""
Correlation of a file's exports with resolved references.

Re-export detection rescans relay files as text, so it shares the limits
of the regex-based extractors: it can be fooled by commented-out or
oddly formatted export statements.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from graph.model import (
    DEFAULT,
    DIRECT,
    RE_EXPORT,
    AliasEntry,
    DependencyConnection,
    DependencyGraph,
    ReferenceRecord,
    SymbolDescriptor,
)
from .exports import read_source
from .finder import module_name
from .resolver import resolve_import_path

logger = logging.getLogger(__name__)


_PATH = r"['\"]([^'\"]+)['\"]"

REEXPORT_STATEMENTS = (
    re.compile(r"export\s*(?:type\s+)?\{[^}]*\}\s*from\s*" + _PATH),
    re.compile(r"export\s*\*\s*(?:as\s+[\w$]+\s*)?from\s*" + _PATH),
)


def reexport_specifiers(content: str) -> List[str]:
    """Import specifiers of every ``export ... from`` statement in *content*."""
    specifiers: List[str] = []
    for pattern in REEXPORT_STATEMENTS:
        for match in pattern.finditer(content):
            specifiers.append(match.group(1))
    return specifiers


def _last_segment(specifier: str) -> str:
    return specifier.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


def _names_source(specifier: str, source_file: Path) -> bool:
    """True if the specifier's last segment names the source module."""
    segment = _last_segment(specifier)
    return segment in (source_file.name, source_file.stem, module_name(source_file))


def is_alias_resolved_to_source(
    specifier: str,
    source_file: Path,
    relay_file: Path,
    records: Sequence[ReferenceRecord],
) -> bool:
    """
    Check whether an aliased re-export specifier points at the source.

    Accepted when the alias ends in the source's module name, or when a
    record from the relay itself mentions the same specifier.
    """
    if _last_segment(specifier) in (source_file.stem, module_name(source_file)):
        return True
    return any(
        record.consumer_file == relay_file and specifier in record.source_text
        for record in records
    )


def is_reexport_chain(
    source_file: Path,
    relay_file: Path,
    records: Sequence[ReferenceRecord],
    *,
    root: Optional[Path] = None,
    aliases: Sequence[AliasEntry] = (),
    _visited: Optional[Set[Path]] = None,
) -> bool:
    """
    Check if *relay_file* re-exports from *source_file*.

    Each ``export {...} from`` / ``export * from`` specifier in the relay
    is matched against the source: by resolving it (when *root* is known),
    by its last path segment, or through an alias. With *root*, chains of
    relays are followed.

    Args:
        source_file: The analyzed file.
        relay_file: The file a consumer imports from.
        records: All resolved reference records of this run.
        root: Project root, enabling real path resolution.
        aliases: Alias table used for resolution.

    Returns:
        True if the relay re-exports the source, directly or transitively.
    """
    relay_file = Path(relay_file)
    if not relay_file.is_file():
        return False

    visited = _visited if _visited is not None else set()
    if relay_file in visited:
        return False
    visited.add(relay_file)

    content = read_source(relay_file)
    if content is None:
        return False

    for specifier in reexport_specifiers(content):
        resolved = None
        if root is not None:
            resolved = resolve_import_path(specifier, relay_file, root, aliases)
            if resolved == source_file:
                return True

        if resolved is None:
            if specifier.startswith("."):
                if _names_source(specifier, source_file):
                    return True
            elif is_alias_resolved_to_source(specifier, source_file, relay_file, records):
                return True
        elif is_reexport_chain(
            source_file, resolved, records,
            root=root, aliases=aliases, _visited=visited,
        ):
            return True

    return False


def matching_exports(
    record: ReferenceRecord,
    exports: Sequence[SymbolDescriptor],
    file_path: Path,
) -> List[str]:
    """
    Names from *exports* that a record uses.

    A name matches exactly. A ``default`` export matches any record that
    targets the analyzed file, since a default import may bind any local
    name.
    """
    imported = set(record.imported_names)
    targets_file = record.resolved_target == file_path
    names: List[str] = []
    for symbol in exports:
        if symbol.name in imported or (symbol.kind == DEFAULT and targets_file):
            names.append(symbol.name)
    return names


def correlate(
    file_path: Path,
    exports: Sequence[SymbolDescriptor],
    records: Sequence[ReferenceRecord],
    *,
    root: Optional[Path] = None,
    aliases: Sequence[AliasEntry] = (),
) -> DependencyGraph:
    """
    Build the dependency graph of *file_path* from resolved references.

    A record importing straight from the analyzed file is a direct
    connection; a record importing from a file that re-exports it is a
    re-export connection from that relay. Connections get ids from 1 in
    processing order, and a repeated ``(source, target, kind)`` triple is
    merged into the first connection.

    Args:
        file_path: The analyzed file.
        exports: Its export table, returned unchanged in the graph.
        records: Resolved reference records.
        root: Project root, used to resolve re-export specifiers.
        aliases: Alias table, used to resolve re-export specifiers.

    Returns:
        The dependency graph.
    """
    file_path = Path(file_path).resolve()
    order: List[Tuple[Path, Path, str]] = []
    names_by_edge: Dict[Tuple[Path, Path, str], List[str]] = {}
    relays: Dict[Path, bool] = {}

    for record in records:
        names = matching_exports(record, exports, file_path)
        if not names:
            continue

        target = record.resolved_target
        if target is None or record.consumer_file == file_path:
            continue

        if target == file_path:
            kind, provider = DIRECT, file_path
        else:
            if target not in relays:
                relays[target] = is_reexport_chain(
                    file_path, target, records, root=root, aliases=aliases
                )
            if not relays[target]:
                continue
            kind, provider = RE_EXPORT, target

        key = (provider, record.consumer_file, kind)
        if key not in names_by_edge:
            order.append(key)
            names_by_edge[key] = []
        for name in names:
            if name not in names_by_edge[key]:
                names_by_edge[key].append(name)

    connections = tuple(
        DependencyConnection(
            id=index,
            source=provider,
            target=consumer,
            kind=kind,
            exported_names=tuple(names_by_edge[(provider, consumer, kind)]),
        )
        for index, (provider, consumer, kind) in enumerate(order, start=1)
    )
    logger.debug("Correlated %d connections for %s", len(connections), file_path)
    return DependencyGraph(file_path=file_path, connections=connections, exports=tuple(exports))
