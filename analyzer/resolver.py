"""Import-statement extraction and resolution of import paths to files."""

import logging
import os
import re
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from graph.model import AliasEntry, ReferenceCandidate, ReferenceRecord
from .discovery import ALLOWED_EXTENSIONS, is_within_root

logger = logging.getLogger(__name__)


_PATH = r"['\"]([^'\"]+)['\"]"

# import { a, b as c } from '...' / import type { A } from '...'
# import Default, { a } from '...'
ES6_NAMED_IMPORT = re.compile(
    r"import\s*(?:type\s+)?(?:[\w$]+\s*,\s*)?\{([^}]+)\}\s*from\s*" + _PATH
)
# import Default from '...' / import Default, { a } from '...'
ES6_DEFAULT_IMPORT = re.compile(
    r"import\s+(?:type\s+)?([\w$]+)\s*(?:,\s*\{[^}]*\}\s*)?from\s*" + _PATH
)
# const { a, b: c } = require('...')
COMMONJS_DESTRUCTURING = re.compile(
    r"(?:const|let|var)\s*\{([^}]+)\}\s*=\s*require\s*\(\s*" + _PATH + r"\s*\)"
)
# const a = require('...') / const a = require('...').member
COMMONJS_DEFAULT = re.compile(
    r"(?:const|let|var)\s+([\w$]+)\s*=\s*require\s*\(\s*" + _PATH + r"\s*\)(?:\s*\.\s*([\w$]+))?"
)

ImportPair = Tuple[Tuple[str, ...], str]


def _split_names(body: str, separator: str) -> Tuple[str, ...]:
    """Split a brace list and keep the exported side of each binding."""
    names: List[str] = []
    for part in body.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("type "):
            part = part[5:].strip()
        name = part.split(separator, 1)[0].strip()
        if name:
            names.append(name)
    return tuple(names)


def iter_es6_named_imports(text: str) -> Iterator[ImportPair]:
    for match in ES6_NAMED_IMPORT.finditer(text):
        names = _split_names(match.group(1), " as ")
        if names and match.group(2):
            yield names, match.group(2)


def iter_es6_default_imports(text: str) -> Iterator[ImportPair]:
    for match in ES6_DEFAULT_IMPORT.finditer(text):
        if match.group(1) and match.group(2):
            yield (match.group(1),), match.group(2)


def iter_commonjs_destructuring(text: str) -> Iterator[ImportPair]:
    for match in COMMONJS_DESTRUCTURING.finditer(text):
        names = _split_names(match.group(1), ":")
        if names and match.group(2):
            yield names, match.group(2)


def iter_commonjs_default(text: str) -> Iterator[ImportPair]:
    for match in COMMONJS_DEFAULT.finditer(text):
        # require('./m').member imports the member, not the module
        name = match.group(3) or match.group(1)
        if name and match.group(2):
            yield (name,), match.group(2)


STATEMENT_EXTRACTORS = (
    iter_es6_named_imports,
    iter_es6_default_imports,
    iter_commonjs_destructuring,
    iter_commonjs_default,
)


def extract_import_statements(text: str) -> List[ImportPair]:
    """Run every statement extractor over *text*, in a fixed order."""
    pairs: List[ImportPair] = []
    for extractor in STATEMENT_EXTRACTORS:
        pairs.extend(extractor(text))
    return pairs


def find_file_with_extension(
    base: Path,
    extensions: Sequence[str] = ALLOWED_EXTENSIONS,
) -> Optional[Path]:
    """
    Locate the concrete file for an extensionless (or explicit) base path.

    Tries the path itself when it carries an extension, then each allowed
    extension appended, then ``base/index.<ext>``.

    Returns:
        The resolved file path, or None if nothing exists.
    """
    if base.suffix:
        if base.is_file():
            return base.resolve()
        if base.suffix.lower() in {ext.lower() for ext in extensions}:
            return None
        # './foo.service' names foo.service.ts, not a file with suffix .service

    for ext in extensions:
        candidate = Path(f"{base}{ext}")
        if candidate.is_file():
            return candidate.resolve()

    for ext in extensions:
        candidate = base / f"index{ext}"
        if candidate.is_file():
            return candidate.resolve()

    return None


def _alias_target(alias: AliasEntry, root: Path) -> Path:
    target = Path(alias.target_dir.replace("\\", "/"))
    if not target.is_absolute():
        target = root / target
    return target


def match_alias(
    import_path: str,
    aliases: Sequence[AliasEntry],
    root: Path,
) -> Optional[Path]:
    """
    Map an import path through the alias table.

    Exact (non-wildcard) patterns win; otherwise the wildcard pattern with
    the longest prefix is used.

    Returns:
        The base path the import points at, or None if no alias matches.
    """
    for alias in aliases:
        if not alias.is_wildcard and import_path == alias.pattern.replace("\\", "/"):
            return _alias_target(alias, root)

    best: Optional[Tuple[int, Path]] = None
    for alias in aliases:
        if not alias.is_wildcard:
            continue
        prefix, _, suffix = alias.pattern.replace("\\", "/").partition("*")
        if not import_path.startswith(prefix) or not import_path.endswith(suffix):
            continue
        if len(import_path) < len(prefix) + len(suffix):
            continue
        rest = import_path[len(prefix):len(import_path) - len(suffix)]
        if best is None or len(prefix) > best[0]:
            best = (len(prefix), _alias_target(alias, root) / rest)

    return best[1] if best is not None else None


def resolve_import_path(
    import_path: str,
    from_file: Path,
    root: Path,
    aliases: Sequence[AliasEntry] = (),
    extensions: Sequence[str] = ALLOWED_EXTENSIONS,
) -> Optional[Path]:
    """
    Resolve an import specifier to an existing file.

    Args:
        import_path: The specifier as written in the import statement.
        from_file: The file containing the import.
        root: Project root directory.
        aliases: Alias table; empty means no aliases configured.
        extensions: Extensions to probe, in priority order.

    Returns:
        Absolute path of the imported file, or None if it cannot be found
        (e.g. a package outside the project).
    """
    if not import_path:
        return None

    root = Path(root).resolve()
    normalized = import_path.replace("\\", "/")

    if normalized in (".", "..") or normalized.startswith(("./", "../")):
        base = Path(os.path.normpath(Path(from_file).parent / normalized))
        if not is_within_root(base, root):
            logger.debug("Import %s from %s leaves the project", import_path, from_file)
            return None
        return find_file_with_extension(base, extensions)

    aliased = match_alias(normalized, aliases, root)
    if aliased is not None:
        return find_file_with_extension(Path(os.path.normpath(aliased)), extensions)

    if normalized.startswith("/") or normalized.startswith("."):
        return None
    return find_file_with_extension(root / normalized, extensions)


def resolve_references(
    root: Path,
    aliases: Sequence[AliasEntry],
    candidates: Sequence[ReferenceCandidate],
    extensions: Sequence[str] = ALLOWED_EXTENSIONS,
) -> List[ReferenceRecord]:
    """
    Turn candidate files into resolved import records.

    One record is produced per import/require statement whose path
    resolves to an existing file; the rest are dropped.

    Args:
        root: Project root directory.
        aliases: Alias table.
        candidates: Files and matched text from the reference finder.
        extensions: Extensions to probe, in priority order.

    Returns:
        Reference records in candidate order, then statement order.
    """
    root = Path(root).resolve()
    records: List[ReferenceRecord] = []

    for candidate in candidates:
        consumer = Path(candidate.filename).resolve()
        for names, import_path in extract_import_statements(candidate.matched_text):
            resolved = resolve_import_path(import_path, consumer, root, aliases, extensions)
            if resolved is None:
                logger.debug("Unresolved import %r in %s", import_path, consumer)
                continue
            records.append(
                ReferenceRecord(
                    consumer_file=consumer,
                    source_text=candidate.matched_text,
                    resolved_target=resolved,
                    imported_names=names,
                    import_path=import_path,
                )
            )

    logger.debug("Resolved %d references", len(records))
    return records
