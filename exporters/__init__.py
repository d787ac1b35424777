"""Exporters for converting a dependency graph to various output formats."""

from .mermaid_exporter import to_mermaid
from .ascii_exporter import to_ascii, to_ascii_files
from .json_exporter import to_json, files_to_json
from .svg_exporter import to_svg

__all__ = ["to_mermaid", "to_ascii", "to_ascii_files", "to_json", "files_to_json", "to_svg"]
