#!/usr/bin/env python3
"""
exportmap CLI

Find every file in a JavaScript/TypeScript project that consumes the
exports of a given file, and render the result as a dependency graph.
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from analyzer.builder import analyze_file, find_related_files
from analyzer.config import load_settings
from analyzer.discovery import find_project_root
from analyzer.errors import ExportMapError
from analyzer.search import get_engine
from exporters import files_to_json, to_ascii, to_ascii_files, to_json, to_mermaid, to_svg


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="exportmap",
        description="Find the files that consume a source file's exports.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  exportmap src/utils.ts                      # ASCII tree of consumers
  exportmap src/utils.ts -f mermaid           # Mermaid flowchart
  exportmap src/utils.ts -f json -o deps.json # JSON output to file
  exportmap src/utils.ts -f svg -o deps.svg   # SVG diagram
  exportmap src/utils.ts --only-files         # Just list consumer files
  exportmap src/utils.ts --engine python      # Search without ripgrep
        """,
    )

    parser.add_argument(
        "file",
        help="Source file whose consumers should be found",
    )

    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Project root (default: nearest directory with package.json, tsconfig.json, jsconfig.json or .git)",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "-f", "--format",
        choices=["ascii", "mermaid", "json", "svg"],
        default="ascii",
        help="Output format (default: ascii)",
    )

    parser.add_argument(
        "--orientation",
        choices=["LR", "TD", "TB", "RL", "BT"],
        default="LR",
        help="Mermaid flowchart orientation (default: LR)",
    )

    parser.add_argument(
        "--group-by-dir",
        action="store_true",
        help="Group nodes by top-level directory in Mermaid output",
    )

    parser.add_argument(
        "--ascii-style",
        choices=["tree", "ascii"],
        default="tree",
        help="ASCII output style: 'tree' (Unicode) or 'ascii' (pure ASCII)",
    )

    parser.add_argument(
        "--relative-to",
        type=str,
        default=None,
        help="Base path for relative path display",
    )

    # Analysis options
    parser.add_argument(
        "--only-files",
        action="store_true",
        help="List related files only (skip export correlation)",
    )

    parser.add_argument(
        "--engine",
        choices=["ripgrep", "python"],
        default="ripgrep",
        help="Text search engine (default: ripgrep)",
    )

    parser.add_argument(
        "--rg-path",
        type=str,
        default=None,
        help="Path to the ripgrep executable (default: rg on PATH)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    return parser.parse_args(args)


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if parsed.verbose:
        for name in ("analyzer", "exporters"):
            logging.getLogger(name).setLevel(logging.DEBUG)

    file_path = Path(parsed.file).resolve()
    if parsed.root:
        root = Path(parsed.root).resolve()
        if not root.is_dir():
            print(f"Error: '{parsed.root}' is not a directory", file=sys.stderr)
            return 1
    else:
        root = find_project_root(file_path)
        if root is None:
            print(f"Error: project root not found for '{parsed.file}'", file=sys.stderr)
            return 1

    base = Path(parsed.relative_to).resolve() if parsed.relative_to else root

    settings = load_settings(root)
    if parsed.rg_path:
        settings = replace(settings, ripgrep=parsed.rg_path)

    engine = get_engine(parsed.engine, settings.ripgrep)
    if not engine.is_available():
        print(
            "Error: ripgrep (rg) not found. Install it, pass --rg-path, "
            "or use --engine python",
            file=sys.stderr,
        )
        return 1

    try:
        if parsed.only_files:
            files = find_related_files(file_path, root=root, settings=settings, engine=engine)
        else:
            graph = analyze_file(file_path, root=root, settings=settings, engine=engine)
    except ExportMapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Generate output
    if parsed.only_files:
        if parsed.format == "json":
            output = files_to_json(files, root=root, base=base)
        else:
            output = to_ascii_files(files, root=root, base=base)
    elif parsed.format == "mermaid":
        output = to_mermaid(
            graph=graph,
            root=root,
            orientation=parsed.orientation,
            base=base,
            group_by_directory=parsed.group_by_dir,
        )
    elif parsed.format == "json":
        output = to_json(graph=graph, root=root, base=base)
    elif parsed.format == "svg":
        output = to_svg(graph=graph, root=root, base=base)
    else:  # ascii (default)
        output = to_ascii(graph=graph, root=root, base=base, style=parsed.ascii_style)

    # Write output
    if parsed.output:
        try:
            output_path = Path(parsed.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output, encoding="utf-8")
            print(f"Output written to: {output_path}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
