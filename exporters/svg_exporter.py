"""SVG diagram exporter for dependency graphs."""

import math
from pathlib import Path
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from graph.model import DependencyGraph
from .json_exporter import _get_path_str


NODE_WIDTH = 220
NODE_HEIGHT = 80
PADDING = 50
HEADER_HEIGHT = 100
FOOTER_HEIGHT = 120
ROW_HEIGHT = 200
MIN_NODE_SPACING = 250

SOURCE_FILL, SOURCE_STROKE = "#fef2f2", "#dc2626"
DIRECT_FILL, DIRECT_STROKE = "#f0fdf4", "#16a34a"
REEXPORT_FILL, REEXPORT_STROKE = "#dbeafe", "#2563eb"
TEXT_COLOR = "#374151"
FONT = "system-ui, -apple-system, sans-serif"


def _grid(count: int) -> Tuple[int, int]:
    """Columns and rows used to lay out *count* consumer nodes."""
    if count <= 2:
        cols = max(count, 1)
    elif count <= 4:
        cols = 2
    elif count <= 6:
        cols = 3
    else:
        cols = math.ceil(math.sqrt(count))
    return cols, max(1, math.ceil(count / cols))


def to_svg(
    graph: DependencyGraph,
    root: Path,
    base: Optional[Path] = None,
) -> str:
    """
    Render a dependency graph as an SVG diagram.

    The analyzed file sits on the left; consumers are laid out on a grid
    to the right, green for direct and blue for re-export connections,
    each labelled with the indices of the exports it uses.

    Args:
        graph: The dependency graph to export.
        root: Project root for relative paths.
        base: Optional base path for relative path display.

    Returns:
        SVG document string.
    """
    if base is None:
        base = root

    connections = graph.connections
    cols, rows = _grid(len(connections))
    labels = [_get_path_str(c.target, base, root) for c in connections]
    longest = max((len(label) for label in labels), default=0)
    spacing = max(MIN_NODE_SPACING, 180 + longest * 4)

    consumer_height = rows * ROW_HEIGHT
    width = max(1100, PADDING * 2 + 400 + cols * spacing)
    height = HEADER_HEIGHT + max(400, consumer_height) + FOOTER_HEIGHT
    source_x = PADDING + 120
    source_y = HEADER_HEIGHT + max(200, consumer_height // 2)
    start_x = source_x + 400
    start_y = HEADER_HEIGHT + 120

    file_name = escape(graph.file_path.name)
    parts: List[str] = [
        f'<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg" '
        f'viewBox="0 0 {width} {height}">',
        "<defs>",
        '<marker id="arrowhead" markerWidth="10" markerHeight="8" refX="9" refY="4" '
        f'orient="auto" markerUnits="strokeWidth"><polygon points="0 0, 10 4, 0 8" fill="{TEXT_COLOR}"/></marker>',
        '<filter id="shadow" x="-50%" y="-50%" width="200%" height="200%">'
        '<feDropShadow dx="3" dy="3" stdDeviation="4" flood-color="#000000" flood-opacity="0.15"/></filter>',
        "</defs>",
        f'<rect width="{width}" height="{height}" fill="#fafafa"/>',
        f'<rect x="0" y="0" width="{width}" height="{HEADER_HEIGHT}" fill="#ffffff" stroke="#e5e7eb"/>',
        _text(width / 2, 35, f"{file_name} Dependencies", size=20, weight="600", fill="#1f2937"),
        _text(width / 2, 60, f"Root: {escape(str(root))}", size=13, fill="#6b7280"),
        _text(width / 2, 80, escape(_get_path_str(graph.file_path, base, root)),
              size=11, fill="#9ca3af", family="monospace"),
    ]

    positions = []
    for index in range(len(connections)):
        row, col = divmod(index, cols)
        positions.append((start_x + col * spacing, start_y + row * ROW_HEIGHT))

    for x, y in positions:
        end_x = x - NODE_WIDTH / 2
        begin_x = source_x + NODE_WIDTH
        offset = abs(y - source_y) * 0.3
        control_y = source_y + offset if source_y < y else source_y - offset
        parts.append(
            f'<path d="M {begin_x} {source_y} Q {(begin_x + end_x) / 2} {control_y} {end_x} {y}" '
            f'stroke="{TEXT_COLOR}" stroke-width="1" fill="none" marker-end="url(#arrowhead)"/>'
        )

    parts.append(_box(source_x, source_y - NODE_HEIGHT / 2, NODE_HEIGHT, SOURCE_FILL, SOURCE_STROKE, 3))
    parts.append(_text(source_x + NODE_WIDTH / 2, source_y - 5, file_name,
                       size=14, weight="600", fill="#991b1b"))
    parts.append(_text(source_x + NODE_WIDTH / 2, source_y + 15, "Source File", size=10, fill="#6b7280"))

    for connection, label, (x, y) in zip(connections, labels, positions):
        fill, stroke = (DIRECT_FILL, DIRECT_STROKE) if connection.is_direct else (REEXPORT_FILL, REEXPORT_STROKE)
        box_height = 100 if len(label) > 30 else NODE_HEIGHT
        numbers = ",".join(str(n) for n in graph.export_numbers(connection))
        parts.append(_box(x - NODE_WIDTH / 2, y - box_height / 2, box_height, fill, stroke, 2))
        parts.append(_text(x, y - 5, escape(label), size=10, weight="600"))
        parts.append(_text(x, y + 12, f"[{numbers}]", size=12, weight="bold"))

    footer_y = height - FOOTER_HEIGHT
    summary = ", ".join(f"[{i}]{escape(s.name)}" for i, s in enumerate(graph.exports, start=1))
    parts.extend([
        f'<rect x="0" y="{footer_y}" width="{width}" height="{FOOTER_HEIGHT}" fill="#ffffff" stroke="#e5e7eb"/>',
        _text(width / 2, footer_y + 30, "Exports Summary", size=14, weight="600", fill="#1f2937"),
        _text(width / 2, footer_y + 50, summary, size=11, weight="bold", family="monospace"),
        _text(
            width / 2, footer_y + 70,
            f"{len(graph.exports)} exports • {len(graph.consumers())} consumers • "
            f"{len(graph.direct_connections())} direct connections",
            size=11, fill="#6b7280",
        ),
    ])
    parts.extend(_legend(width - 260, footer_y + 85))
    parts.append("</svg>")

    return "\n".join(parts)


def _box(x: float, y: float, height: float, fill: str, stroke: str, stroke_width: int) -> str:
    return (
        f'<rect x="{x}" y="{y}" width="{NODE_WIDTH}" height="{height}" fill="{fill}" '
        f'stroke="{stroke}" stroke-width="{stroke_width}" rx="10" filter="url(#shadow)"/>'
    )


def _text(
    x: float,
    y: float,
    content: str,
    size: int = 12,
    weight: str = "normal",
    fill: str = TEXT_COLOR,
    family: str = FONT,
) -> str:
    return (
        f'<text x="{x}" y="{y}" text-anchor="middle" font-family="{family}" '
        f'font-size="{size}" font-weight="{weight}" fill="{fill}">{content}</text>'
    )


def _legend(x: float, y: float) -> List[str]:
    items = [("Source", SOURCE_FILL, SOURCE_STROKE), ("Direct", DIRECT_FILL, DIRECT_STROKE),
             ("Re-export", REEXPORT_FILL, REEXPORT_STROKE)]
    parts = []
    for offset, (label, fill, stroke) in zip((0, 80, 160), items):
        parts.append(
            f'<rect x="{x + offset}" y="{y}" width="12" height="12" fill="{fill}" stroke="{stroke}" rx="2"/>'
        )
        parts.append(
            f'<text x="{x + offset + 18}" y="{y + 10}" font-family="{FONT}" font-size="10" '
            f'fill="{TEXT_COLOR}">{label}</text>'
        )
    return parts
