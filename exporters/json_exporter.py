"""JSON exporter for dependency graphs (machine-friendly format)."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from graph.model import DependencyGraph


def to_json(
    graph: DependencyGraph,
    root: Path,
    base: Optional[Path] = None,
    indent: int = 2,
) -> str:
    """
    Convert a dependency graph to JSON format.

    Args:
        graph: The dependency graph to export.
        root: Project root for relative paths.
        base: Optional base path for relative path display.
        indent: JSON indentation level.

    Returns:
        JSON string with ``filePath``, ``connections``, ``exports`` and a
        ``summary`` block.
    """
    if base is None:
        base = root

    data: Dict[str, Any] = graph.to_dict(lambda path: _get_path_str(path, base, root))
    data["root"] = str(root).replace("\\", "/")
    data["summary"] = {
        "exports": len(graph.exports),
        "consumers": len(graph.consumers()),
        "connections": len(graph.connections),
        "direct": len(graph.direct_connections()),
        "reExport": len(graph.reexport_connections()),
    }

    return json.dumps(data, indent=indent)


def files_to_json(
    files: Sequence[Path],
    root: Path,
    base: Optional[Path] = None,
    indent: int = 2,
) -> str:
    """Convert a plain list of related files to a JSON array."""
    if base is None:
        base = root
    return json.dumps([_get_path_str(path, base, root) for path in files], indent=indent)


def _get_path_str(path: Path, base: Path, root: Path) -> str:
    """Get the string representation of a path."""
    try:
        rel_path = path.resolve().relative_to(base.resolve())
        return str(rel_path).replace("\\", "/")
    except ValueError:
        try:
            rel_path = path.resolve().relative_to(root.resolve())
            return str(rel_path).replace("\\", "/")
        except ValueError:
            return str(path).replace("\\", "/")
