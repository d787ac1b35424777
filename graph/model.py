"""Graph data model for export/consumer relationships."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


# Symbol kinds produced by the export extractor
FUNCTION = "function"
VARIABLE = "variable"
CLASS = "class"
INTERFACE = "interface"
TYPE = "type"
ENUM = "enum"
DEFAULT = "default"
PROPERTY = "property"
NAMED = "named"
RE_EXPORT = "re-export"

SYMBOL_KINDS = (
    FUNCTION, VARIABLE, CLASS, INTERFACE, TYPE,
    ENUM, DEFAULT, PROPERTY, NAMED, RE_EXPORT,
)

# Connection kinds produced by the correlator
DIRECT = "direct"
CONNECTION_KINDS = (DIRECT, RE_EXPORT)


@dataclass(frozen=True)
class SymbolDescriptor:
    """One exported name and its syntactic category."""

    name: str
    kind: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.kind}


@dataclass(frozen=True)
class AliasEntry:
    """Import prefix (optionally with one ``*``) mapped to a directory."""

    pattern: str
    target_dir: str

    @property
    def is_wildcard(self) -> bool:
        return "*" in self.pattern


@dataclass(frozen=True)
class ReferenceCandidate:
    """A file surfaced by text search, with every matched line joined."""

    filename: Path
    matched_text: str


@dataclass(frozen=True)
class ReferenceRecord:
    """
    One import/require statement found in a consumer file.

    ``resolved_target`` is None when the statement could not be mapped to
    an existing file; the resolver drops those before returning.
    """

    consumer_file: Path
    source_text: str
    resolved_target: Optional[Path]
    imported_names: Tuple[str, ...]
    import_path: str = ""


@dataclass(frozen=True)
class DependencyConnection:
    """
    An edge from a provider to a consumer file.

    ``source`` is the analyzed file for direct connections and the relay
    file for re-export connections. ``target`` is always the consumer.
    """

    id: int
    source: Path
    target: Path
    kind: str
    exported_names: Tuple[str, ...] = ()

    @property
    def is_direct(self) -> bool:
        return self.kind == DIRECT


@dataclass(frozen=True)
class DependencyGraph:
    """
    Consumers of one analyzed file.

    Built once per analysis run and never mutated. ``exports`` keeps the
    extractor's first-seen order, which renderers use for numbering.
    """

    file_path: Path
    connections: Tuple[DependencyConnection, ...] = field(default_factory=tuple)
    exports: Tuple[SymbolDescriptor, ...] = field(default_factory=tuple)

    def export_index(self, name: str) -> Optional[int]:
        """Return the 1-based position of an export, or None if unknown."""
        for index, symbol in enumerate(self.exports, start=1):
            if symbol.name == name:
                return index
        return None

    def export_numbers(self, connection: DependencyConnection) -> List[int]:
        """Sorted 1-based export indices used by a connection."""
        numbers = set()
        for name in connection.exported_names:
            index = self.export_index(name)
            if index is not None:
                numbers.add(index)
        return sorted(numbers)

    def direct_connections(self) -> List[DependencyConnection]:
        return [c for c in self.connections if c.kind == DIRECT]

    def reexport_connections(self) -> List[DependencyConnection]:
        return [c for c in self.connections if c.kind == RE_EXPORT]

    def consumers(self) -> List[Path]:
        """All consumer files, in connection order, without duplicates."""
        seen: Dict[Path, None] = {}
        for connection in self.connections:
            seen.setdefault(connection.target, None)
        return list(seen)

    def relays(self) -> List[Path]:
        """Intermediate files that re-export the analyzed file."""
        seen: Dict[Path, None] = {}
        for connection in self.reexport_connections():
            seen.setdefault(connection.source, None)
        return list(seen)

    def to_dict(self, path_str=str) -> Dict[str, Any]:
        """
        Plain-data form of the graph.

        Args:
            path_str: Callable used to render every path.
        """
        return {
            "filePath": path_str(self.file_path),
            "connections": [
                {
                    "id": c.id,
                    "from": path_str(c.source),
                    "to": path_str(c.target),
                    "type": c.kind,
                    "exports": list(c.exported_names),
                }
                for c in self.connections
            ],
            "exports": [symbol.to_dict() for symbol in self.exports],
        }

    def __repr__(self) -> str:
        return (
            f"DependencyGraph(file={self.file_path.name}, exports={len(self.exports)}, "
            f"connections={len(self.connections)}, direct={len(self.direct_connections())})"
        )
