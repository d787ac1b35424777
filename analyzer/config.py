"""Project configuration: settings files and path aliases."""

import json
import logging
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from graph.model import AliasEntry
from .discovery import ALLOWED_EXTENSIONS, IGNORE_PATTERNS

logger = logging.getLogger(__name__)


# Checked in order; the first existing file wins.
SETTINGS_FILES = (".exportmap.yaml", ".exportmap.yml", ".exportmap.toml")
PACKAGE_JSON_KEY = "exportmap"
ALIAS_CONFIG_FILES = ("tsconfig.json", "jsconfig.json")

# Strings, block comments and line comments; strings are kept as-is.
_JSONC_TOKENS = re.compile(r'("(?:\\.|[^"\\])*")|/\*.*?\*/|//[^\n]*', re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


@dataclass(frozen=True)
class Settings:
    """Options that shape a run."""

    extensions: Tuple[str, ...] = ALLOWED_EXTENSIONS
    ignore_patterns: Tuple[str, ...] = IGNORE_PATTERNS
    aliases: Tuple[AliasEntry, ...] = ()
    ripgrep: Optional[str] = None
    source: Optional[Path] = field(default=None, compare=False)


def strip_json_comments(content: str) -> str:
    """Remove ``//`` and ``/* */`` comments and trailing commas (tsconfig style)."""
    without_comments = _JSONC_TOKENS.sub(lambda m: m.group(1) or "", content)
    return _TRAILING_COMMA.sub(r"\1", without_comments)


def parse_file(file_path: Path) -> Optional[Any]:
    """
    Parse a configuration file and return its contents.

    JSON files may contain comments and trailing commas.

    Args:
        file_path: Path to the file to parse.

    Returns:
        Parsed data structure, or None if the file is missing or invalid.
    """
    suffix = file_path.suffix.lower()

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(content)

        elif suffix == ".toml":
            return tomllib.loads(content)

        else:
            return json.loads(strip_json_comments(content))

    except (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        logger.warning("Could not parse %s: %s", file_path, e)
        return None


def _normalize_extensions(values: List[str]) -> Tuple[str, ...]:
    extensions = []
    for ext in values:
        ext = str(ext).strip()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        extensions.append(ext.lower())
    return tuple(extensions)


def _aliases_from_mapping(mapping: Dict[str, Any], base_dir: Path) -> List[AliasEntry]:
    """
    Build alias entries from ``{pattern: target}`` pairs.

    A target may be a list (tsconfig ``paths`` style); its first entry is
    used. A ``*`` in the target is dropped, so ``src/*`` maps to ``src``.
    """
    entries: List[AliasEntry] = []
    for pattern, target in mapping.items():
        if isinstance(target, list):
            target = target[0] if target else None
        if not isinstance(target, str) or not target:
            continue
        target_dir = (base_dir / target.replace("*", "")).resolve()
        entries.append(AliasEntry(pattern=str(pattern), target_dir=str(target_dir)))
    return entries


def load_aliases(root: Path) -> List[AliasEntry]:
    """
    Read path aliases from ``tsconfig.json`` or ``jsconfig.json``.

    Uses ``compilerOptions.baseUrl`` (default: the project root) and
    ``compilerOptions.paths``.

    Returns:
        Alias entries, or an empty list when no config defines any.
    """
    for name in ALIAS_CONFIG_FILES:
        config_path = root / name
        if not config_path.is_file():
            continue
        data = parse_file(config_path)
        if not isinstance(data, dict):
            continue
        options = data.get("compilerOptions") or {}
        paths = options.get("paths") or {}
        if not isinstance(paths, dict):
            continue
        base_dir = root / str(options.get("baseUrl") or ".")
        entries = _aliases_from_mapping(paths, base_dir)
        logger.debug("Loaded %d aliases from %s", len(entries), config_path)
        return entries
    return []


def _read_settings_data(root: Path) -> Tuple[Optional[Dict[str, Any]], Optional[Path]]:
    for name in SETTINGS_FILES:
        path = root / name
        if path.is_file():
            data = parse_file(path)
            if isinstance(data, dict):
                # .exportmap.toml may nest everything under [exportmap]
                return data.get("exportmap", data), path
            return None, path

    package_json = root / "package.json"
    if package_json.is_file():
        data = parse_file(package_json)
        if isinstance(data, dict) and isinstance(data.get(PACKAGE_JSON_KEY), dict):
            return data[PACKAGE_JSON_KEY], package_json

    return None, None


def load_settings(root: Path) -> Settings:
    """
    Load run settings for a project.

    Reads the first of ``.exportmap.yaml``, ``.exportmap.yml``,
    ``.exportmap.toml`` or the ``"exportmap"`` key of ``package.json``.
    Recognized keys: ``extensions``, ``ignore``, ``aliases`` and
    ``ripgrep``. Aliases from tsconfig/jsconfig come first; configured
    aliases are appended.

    Args:
        root: Project root directory.

    Returns:
        Settings, with defaults for everything not configured.
    """
    root = Path(root)
    aliases = load_aliases(root)
    data, source = _read_settings_data(root)
    if not data:
        return Settings(aliases=tuple(aliases), source=source)

    extensions = ALLOWED_EXTENSIONS
    if isinstance(data.get("extensions"), list):
        extensions = _normalize_extensions(data["extensions"]) or ALLOWED_EXTENSIONS

    ignore_patterns = IGNORE_PATTERNS
    if isinstance(data.get("ignore"), list):
        ignore_patterns = tuple(str(p) for p in data["ignore"])

    if isinstance(data.get("aliases"), dict):
        aliases.extend(_aliases_from_mapping(data["aliases"], root))

    ripgrep = data.get("ripgrep")
    logger.debug("Loaded settings from %s", source)
    return Settings(
        extensions=extensions,
        ignore_patterns=ignore_patterns,
        aliases=tuple(aliases),
        ripgrep=str(ripgrep) if ripgrep else None,
        source=source,
    )
