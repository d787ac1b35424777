"""Mermaid flowchart exporter for dependency graphs."""

import re
from pathlib import Path
from typing import Dict, List, Optional, Set

from graph.model import DependencyGraph


def to_mermaid(
    graph: DependencyGraph,
    root: Path,
    orientation: str = "LR",
    base: Optional[Path] = None,
    group_by_directory: bool = False,
) -> str:
    """
    Convert a dependency graph to Mermaid flowchart syntax.

    The analyzed file links to each direct consumer and, with a dotted
    arrow, to each relay; relays link to their consumers. Edge labels are
    the 1-based indices of the exports used.

    Args:
        graph: The dependency graph to export.
        root: Project root for relative paths.
        orientation: Flowchart orientation (LR, TD, TB, RL, BT).
        base: Optional base path for relative path display.
        group_by_directory: If True, group nodes by top-level directory.

    Returns:
        Mermaid flowchart string.
    """
    if base is None:
        base = root

    lines = [f"flowchart {orientation}"]

    nodes: List[Path] = [graph.file_path]
    for connection in graph.connections:
        for node in (connection.source, connection.target):
            if node not in nodes:
                nodes.append(node)

    node_ids: Dict[Path, str] = {node: _sanitize_id(node, root) for node in nodes}

    if group_by_directory:
        lines.extend(_grouped_nodes(nodes, root, base, node_ids))
    else:
        for node in nodes:
            lines.append(f'    {node_ids[node]}["{_get_label(node, base)}"]')

    lines.append("")
    source_id = node_ids[graph.file_path]
    for relay in graph.relays():
        lines.append(f"    {source_id} -.->|re-export| {node_ids[relay]}")

    for connection in graph.connections:
        numbers = ",".join(str(n) for n in graph.export_numbers(connection))
        lines.append(
            f'    {node_ids[connection.source]} -->|"[{numbers}]"| {node_ids[connection.target]}'
        )

    lines.append("")
    lines.append(f"    style {source_id} fill:#fef2f2,stroke:#dc2626,stroke-width:3px")
    for connection in graph.connections:
        color = "#16a34a" if connection.is_direct else "#2563eb"
        lines.append(f"    style {node_ids[connection.target]} stroke:{color}")

    exports = ", ".join(
        f"[{index}]{symbol.name}" for index, symbol in enumerate(graph.exports, start=1)
    )
    lines.append(f"    %% Exports: {exports}")

    return "\n".join(lines)


def _grouped_nodes(
    nodes: List[Path],
    root: Path,
    base: Path,
    node_ids: Dict[Path, str],
) -> List[str]:
    """Node definitions wrapped in subgraphs by top-level directory."""
    lines: List[str] = []

    groups: Dict[str, Set[Path]] = {}
    for node in nodes:
        try:
            rel_path = node.resolve().relative_to(root.resolve())
            top_dir = rel_path.parts[0] if len(rel_path.parts) > 1 else "root"
        except ValueError:
            top_dir = "external"
        groups.setdefault(top_dir, set()).add(node)

    for group_name in sorted(groups):
        lines.append(f"    subgraph {_sanitize_id_simple('dir_' + group_name)}[{group_name}]")
        for node in sorted(groups[group_name]):
            lines.append(f'        {node_ids[node]}["{_get_label(node, base)}"]')
        lines.append("    end")

    return lines


def _sanitize_id(path: Path, root: Path) -> str:
    """
    Convert a file path to a valid Mermaid node ID.

    Mermaid IDs can only contain letters, digits, and underscores.
    """
    try:
        rel_path = path.resolve().relative_to(root.resolve())
    except ValueError:
        rel_path = path

    return _sanitize_id_simple(str(rel_path))


def _sanitize_id_simple(value: str) -> str:
    """Sanitize a string to be a valid Mermaid ID."""
    sanitized = re.sub(r"[/\\.\-]", "_", value)
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", sanitized)
    if sanitized and not sanitized[0].isalpha():
        sanitized = "n_" + sanitized
    return sanitized or "unknown"


def _get_label(path: Path, base: Path) -> str:
    """Get the display label for a node."""
    try:
        rel_path = path.resolve().relative_to(base.resolve())
        return str(rel_path).replace("\\", "/")
    except ValueError:
        return str(path).replace("\\", "/")
