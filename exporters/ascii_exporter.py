"""ASCII tree-style exporter for dependency graphs."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from graph.model import DependencyConnection, DependencyGraph


# Unicode tree characters
UNICODE_BRANCH = "├── "
UNICODE_LAST = "└── "
UNICODE_VERTICAL = "│   "
UNICODE_SPACE = "    "

# ASCII fallback characters
ASCII_BRANCH = "|-- "
ASCII_LAST = "\\-- "
ASCII_VERTICAL = "|   "
ASCII_SPACE = "    "


def to_ascii(
    graph: DependencyGraph,
    root: Path,
    base: Optional[Path] = None,
    style: str = "tree",
    show_summary: bool = True,
) -> str:
    """
    Convert a dependency graph to an ASCII tree.

    The analyzed file is the root; direct consumers hang off it, and each
    relay hangs off it with its own consumers below. Every consumer line
    starts with the indices of the exports it uses.

    Args:
        graph: The dependency graph to export.
        root: Project root for relative paths.
        base: Optional base path for relative path display.
        style: Output style - "tree" (Unicode) or "ascii" (pure ASCII).
        show_summary: If True, append the numbered export list and counts.

    Returns:
        ASCII tree string.
    """
    if base is None:
        base = root

    if style == "ascii":
        chars = (ASCII_BRANCH, ASCII_LAST, ASCII_VERTICAL, ASCII_SPACE)
    else:
        chars = (UNICODE_BRANCH, UNICODE_LAST, UNICODE_VERTICAL, UNICODE_SPACE)

    lines: List[str] = [_get_display_path(graph.file_path, base, root)]

    by_relay: Dict[Path, List[DependencyConnection]] = {}
    for connection in graph.reexport_connections():
        by_relay.setdefault(connection.source, []).append(connection)

    # (label, children) pairs under the root
    items: List[Tuple[str, List[str]]] = []
    for connection in graph.direct_connections():
        items.append((_consumer_label(graph, connection, base, root), []))
    for relay, connections in by_relay.items():
        label = f"{_get_display_path(relay, base, root)} (re-export)"
        children = [_consumer_label(graph, c, base, root) for c in connections]
        items.append((label, children))

    _render_items(items, chars, lines)

    if show_summary:
        lines.append("")
        lines.append(
            "Exports: "
            + ", ".join(f"[{i}]{s.name}" for i, s in enumerate(graph.exports, start=1))
        )
        lines.append(
            f"{len(graph.exports)} exports, {len(graph.consumers())} consumers, "
            f"{len(graph.direct_connections())} direct connections"
        )

    return "\n".join(lines)


def to_ascii_files(files: List[Path], root: Path, base: Optional[Path] = None) -> str:
    """Render a plain list of related files, one per line."""
    if base is None:
        base = root
    return "\n".join(_get_display_path(path, base, root) for path in files)


def _render_items(
    items: List[Tuple[str, List[str]]],
    chars: Tuple[str, str, str, str],
    lines: List[str],
) -> None:
    """Render two levels of tree items (modifies *lines* in place)."""
    branch, last, vertical, space = chars

    for index, (label, children) in enumerate(items):
        is_last = index == len(items) - 1
        lines.append(f"{last if is_last else branch}{label}")
        prefix = space if is_last else vertical
        for child_index, child in enumerate(children):
            child_is_last = child_index == len(children) - 1
            lines.append(f"{prefix}{last if child_is_last else branch}{child}")


def _consumer_label(
    graph: DependencyGraph,
    connection: DependencyConnection,
    base: Path,
    root: Path,
) -> str:
    numbers = ",".join(str(n) for n in graph.export_numbers(connection))
    return f"[{numbers}] {_get_display_path(connection.target, base, root)}"


def _get_display_path(node: Path, base: Path, root: Path) -> str:
    """Get the display path for a node."""
    try:
        # Try relative to base first
        rel_path = node.resolve().relative_to(base.resolve())
        return str(rel_path).replace("\\", "/")
    except ValueError:
        try:
            # Fall back to relative to root
            rel_path = node.resolve().relative_to(root.resolve())
            return str(rel_path).replace("\\", "/")
        except ValueError:
            return str(node).replace("\\", "/")
