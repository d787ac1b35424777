"""
Export extraction for JavaScript/TypeScript sources.

Exports are found with regular expressions, not a parser. Commented-out
code and string literals that look like export statements are matched
too, and unusual formatting can hide real exports. That trade-off is
accepted: the result is a best-effort symbol table.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from graph.model import (
    CLASS,
    DEFAULT,
    ENUM,
    FUNCTION,
    INTERFACE,
    NAMED,
    PROPERTY,
    RE_EXPORT,
    TYPE,
    VARIABLE,
    SymbolDescriptor,
)

logger = logging.getLogger(__name__)


IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

_NAME = r"([A-Za-z_$][\w$]*)"

# Keywords that may follow ``export default`` without being a name.
_DEFAULT_KEYWORDS = (
    "abstract", "async", "class", "const", "enum", "function",
    "interface", "let", "new", "type", "var",
)

# (kind, pattern) pairs in precedence order. The first category to claim
# a name decides its kind.
DECLARATION_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    (FUNCTION, re.compile(r"export\s+(?:async\s+)?function\s*\*?\s*" + _NAME)),
    (VARIABLE, re.compile(r"export\s+(?:const|let|var)\s+(?!enum\s)" + _NAME)),
    (CLASS, re.compile(r"export\s+(?:default\s+)?(?:abstract\s+)?class\s+" + _NAME)),
    (INTERFACE, re.compile(r"export\s+(?:default\s+)?interface\s+" + _NAME)),
    (TYPE, re.compile(r"export\s+(?:default\s+)?type\s+" + _NAME + r"\s*[=<]")),
    (ENUM, re.compile(r"export\s+(?:default\s+)?(?:const\s+)?enum\s+" + _NAME)),
    (DEFAULT, re.compile(r"export\s+default\s+(?:async\s+)?function\s*\*?\s*" + _NAME)),
    (DEFAULT, re.compile(r"export\s+default\s+class\s+" + _NAME)),
    (DEFAULT, re.compile(r"export\s+default\s+(?:const|let|var)\s+" + _NAME)),
    (
        DEFAULT,
        re.compile(
            r"export\s+default\s+(?!(?:" + "|".join(_DEFAULT_KEYWORDS) + r")\b)"
            + _NAME + r"\s*;?[ \t]*$",
            re.MULTILINE,
        ),
    ),
    (FUNCTION, re.compile(r"export\s+const\s+" + _NAME + r"\s*=\s*(?:async\s+)?function")),
    (VARIABLE, re.compile(r"export\s+const\s+" + _NAME + r"\s*=\s*`")),
    (PROPERTY, re.compile(r"^[ \t]*(?:module\.)?exports\." + _NAME + r"\s*=", re.MULTILINE)),
)

RE_EXPORT_LIST = re.compile(
    r"export\s*(?:type\s+)?\{([^}]*)\}\s*from\s*['\"][^'\"]+['\"]"
)
RE_EXPORT_NAMESPACE = re.compile(
    r"export\s*\*\s*as\s+" + _NAME + r"\s+from\s*['\"][^'\"]+['\"]"
)
NAMED_EXPORT_LIST = re.compile(r"export\s*(?:type\s+)?\{([^}]*)\}(?!\s*from\b)")
COMMONJS_OBJECT = re.compile(r"^[ \t]*module\.exports\s*=\s*\{([^}]*)\}", re.MULTILINE)
COMMONJS_DEFAULT = re.compile(r"^[ \t]*module\.exports\s*=\s*" + _NAME + r"\s*;?[ \t]*$", re.MULTILINE)


class _ExportTable:
    """Ordered, first-wins collection of exported names."""

    def __init__(self):
        self._kinds: Dict[str, str] = {}

    def add(self, name: str, kind: str) -> None:
        name = name.strip()
        if not name or not IDENTIFIER.match(name):
            return
        if name not in self._kinds:
            self._kinds[name] = kind

    def add_all(self, names: Iterable[str], kind: str) -> None:
        for name in names:
            self.add(name, kind)

    def symbols(self) -> List[SymbolDescriptor]:
        return [SymbolDescriptor(name, kind) for name, kind in self._kinds.items()]


def split_export_list(body: str, use_alias: bool = True) -> List[str]:
    """
    Split the inside of ``{ ... }`` into names.

    ``a as b`` yields ``b`` when ``use_alias`` is set, otherwise ``a``.
    A leading ``type`` modifier is dropped.
    """
    names: List[str] = []
    for part in body.split(","):
        part = re.sub(r"/\*.*?\*/|//[^\n]*", "", part).strip()
        if not part:
            continue
        if part.startswith("type "):
            part = part[5:].strip()
        original, _, alias = part.partition(" as ")
        name = alias.strip() if (alias and use_alias) else original.strip()
        names.append(name)
    return names


def _object_keys(body: str) -> List[str]:
    """Keys of a CommonJS object literal, ignoring values after a colon."""
    keys: List[str] = []
    for part in body.split(","):
        key = part.split(":", 1)[0].strip()
        if key.startswith("..."):
            continue
        keys.append(key)
    return keys


def extract_exports_from_text(content: str) -> List[SymbolDescriptor]:
    """
    Extract the ordered, deduplicated export table of a source text.

    Categories are applied in a fixed precedence; a name keeps the kind
    of the first category that matched it.
    """
    table = _ExportTable()

    for kind, pattern in DECLARATION_PATTERNS:
        for match in pattern.finditer(content):
            table.add(match.group(1), kind)

    for match in RE_EXPORT_LIST.finditer(content):
        table.add_all(split_export_list(match.group(1)), RE_EXPORT)
    for match in RE_EXPORT_NAMESPACE.finditer(content):
        table.add(match.group(1), RE_EXPORT)

    for match in NAMED_EXPORT_LIST.finditer(content):
        table.add_all(split_export_list(match.group(1)), NAMED)

    for match in COMMONJS_OBJECT.finditer(content):
        table.add_all(_object_keys(match.group(1)), NAMED)
    for match in COMMONJS_DEFAULT.finditer(content):
        table.add(match.group(1), DEFAULT)

    return table.symbols()


def read_source(file_path: Path) -> Optional[str]:
    """Read a source file, returning None if it cannot be read."""
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Could not read %s: %s", file_path, e)
        return None


def extract_exports(file_path: Path) -> List[SymbolDescriptor]:
    """
    Extract the exported symbols of a file.

    Args:
        file_path: The source file to analyze.

    Returns:
        Symbol descriptors in first-seen order, or an empty list if the
        file does not exist or cannot be read.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        logger.debug("No such file: %s", file_path)
        return []

    content = read_source(file_path)
    if content is None:
        return []

    symbols = extract_exports_from_text(content)
    logger.debug("Found %d exports in %s", len(symbols), file_path)
    return symbols
