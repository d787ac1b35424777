"""Analysis pipeline: export extraction, reference search, resolution and correlation."""

from .exports import extract_exports, extract_exports_from_text
from .finder import build_patterns, find_references
from .resolver import resolve_import_path, resolve_references
from .correlator import correlate, is_reexport_chain
from .builder import analyze_file, find_related_files
from .search import RipgrepSearch, WalkSearch, get_engine

__all__ = [
    "extract_exports",
    "extract_exports_from_text",
    "build_patterns",
    "find_references",
    "resolve_import_path",
    "resolve_references",
    "correlate",
    "is_reexport_chain",
    "analyze_file",
    "find_related_files",
    "RipgrepSearch",
    "WalkSearch",
    "get_engine",
]
