"""Tests for exporters."""

import json
from pathlib import Path

from graph.model import (
    DEFAULT,
    DIRECT,
    FUNCTION,
    RE_EXPORT,
    DependencyConnection,
    DependencyGraph,
    SymbolDescriptor,
)
from exporters.mermaid_exporter import to_mermaid
from exporters.ascii_exporter import to_ascii, to_ascii_files
from exporters.json_exporter import files_to_json, to_json
from exporters.svg_exporter import to_svg


ROOT = Path("/repo")
UTIL = ROOT / "src" / "util.ts"
INDEX = ROOT / "src" / "index.ts"
APP = ROOT / "app" / "main.ts"
PAGE = ROOT / "app" / "page.tsx"


def _graph():
    exports = (SymbolDescriptor("helper", FUNCTION), SymbolDescriptor("Store", DEFAULT))
    connections = (
        DependencyConnection(1, UTIL, APP, DIRECT, ("helper", "Store")),
        DependencyConnection(2, INDEX, PAGE, RE_EXPORT, ("helper",)),
    )
    return DependencyGraph(UTIL, connections, exports)


def _empty():
    return DependencyGraph(UTIL, (), (SymbolDescriptor("helper", FUNCTION),))


class TestMermaidExporter:
    """Tests for Mermaid exporter."""

    def test_empty_graph(self):
        """Test exporting a graph without consumers."""
        output = to_mermaid(_empty(), ROOT)

        assert output.startswith("flowchart LR")
        assert 'src_util_ts["src/util.ts"]' in output
        assert "-->" not in output

    def test_edges(self):
        """Test edges carry export numbers, relays get a dotted link."""
        output = to_mermaid(_graph(), ROOT)

        assert 'src_util_ts -->|"[1,2]"| app_main_ts' in output
        assert 'src_index_ts -->|"[1]"| app_page_tsx' in output
        assert "src_util_ts -.->|re-export| src_index_ts" in output
        assert "%% Exports: [1]helper, [2]Store" in output

    def test_styles(self):
        """Test source and consumer styling."""
        output = to_mermaid(_graph(), ROOT)

        assert "style src_util_ts fill:#fef2f2,stroke:#dc2626,stroke-width:3px" in output
        assert "style app_main_ts stroke:#16a34a" in output
        assert "style app_page_tsx stroke:#2563eb" in output

    def test_orientation(self):
        """Test different orientations."""
        for orientation in ["LR", "TD", "TB", "RL", "BT"]:
            output = to_mermaid(_graph(), ROOT, orientation=orientation)
            assert output.startswith(f"flowchart {orientation}")

    def test_grouped_output(self):
        """Test grouped output by directory."""
        output = to_mermaid(_graph(), ROOT, group_by_directory=True)

        assert "subgraph dir_app[app]" in output
        assert "subgraph dir_src[src]" in output
        assert output.count("    end") == 2


class TestASCIIExporter:
    """Tests for ASCII exporter."""

    def test_no_consumers(self):
        """Test a graph without connections shows only the file and summary."""
        output = to_ascii(_empty(), ROOT)

        lines = output.splitlines()
        assert lines[0] == "src/util.ts"
        assert "Exports: [1]helper" in lines
        assert "1 exports, 0 consumers, 0 direct connections" in lines

    def test_tree(self):
        """Test direct consumers and relay subtrees."""
        output = to_ascii(_graph(), ROOT, show_summary=False)

        assert output.splitlines() == [
            "src/util.ts",
            "├── [1,2] app/main.ts",
            "└── src/index.ts (re-export)",
            "    └── [1] app/page.tsx",
        ]

    def test_ascii_style(self):
        """Test pure ASCII tree style."""
        output = to_ascii(_graph(), ROOT, style="ascii")

        assert "├" not in output
        assert "└" not in output
        assert "|-- [1,2] app/main.ts" in output

    def test_relative_to(self):
        """Test display paths relative to another base."""
        output = to_ascii(_graph(), ROOT, base=ROOT / "app", show_summary=False)

        assert "[1,2] main.ts" in output
        assert output.splitlines()[0] == "src/util.ts"

    def test_files(self):
        """Test plain file listing."""
        assert to_ascii_files([APP, PAGE], ROOT) == "app/main.ts\napp/page.tsx"


class TestJSONExporter:
    """Tests for JSON exporter."""

    def test_structure(self):
        """Test exported keys and relative paths."""
        data = json.loads(to_json(_graph(), ROOT))

        assert data["filePath"] == "src/util.ts"
        assert data["root"] == "/repo"
        assert data["exports"] == [
            {"name": "helper", "type": "function"},
            {"name": "Store", "type": "default"},
        ]
        assert data["connections"][0] == {
            "id": 1,
            "from": "src/util.ts",
            "to": "app/main.ts",
            "type": "direct",
            "exports": ["helper", "Store"],
        }
        assert data["summary"] == {
            "exports": 2,
            "consumers": 2,
            "connections": 2,
            "direct": 1,
            "reExport": 1,
        }

    def test_empty_graph(self):
        """Test exporting a graph without connections."""
        data = json.loads(to_json(_empty(), ROOT))

        assert data["connections"] == []
        assert data["summary"]["consumers"] == 0

    def test_files(self):
        """Test plain file list output."""
        assert json.loads(files_to_json([APP], ROOT)) == ["app/main.ts"]


class TestSVGExporter:
    """Tests for SVG exporter."""

    def test_document(self):
        """Test the SVG contains nodes, labels and the summary."""
        output = to_svg(_graph(), ROOT)

        assert output.startswith("<svg ")
        assert output.endswith("</svg>")
        assert "util.ts Dependencies" in output
        assert "app/main.ts" in output
        assert "[1,2]" in output
        assert "[1]helper, [2]Store" in output
        assert "#16a34a" in output
        assert "#2563eb" in output

    def test_escapes_names(self):
        """Test markup in names is escaped."""
        graph = DependencyGraph(ROOT / "a&b.ts", (), (SymbolDescriptor("x", FUNCTION),))

        output = to_svg(graph, ROOT)

        assert "a&amp;b.ts" in output
        assert "a&b.ts" not in output

    def test_empty_graph(self):
        """Test a graph without consumers still renders."""
        output = to_svg(_empty(), ROOT)

        assert "0 consumers" in output
        assert output.count("<path ") == 0
