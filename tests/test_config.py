"""Tests for project configuration loading."""

import json
import tempfile
from pathlib import Path

from analyzer.config import Settings, load_aliases, load_settings, parse_file, strip_json_comments
from analyzer.discovery import ALLOWED_EXTENSIONS, IGNORE_PATTERNS
from graph.model import AliasEntry


class TestParseFile:
    """Tests for configuration file parsing."""

    def test_strip_json_comments(self):
        """Test comments and trailing commas are removed, strings are kept."""
        content = """{
  // line comment
  "url": "http://example.com/*not-a-comment*/",
  /* block */
  "list": [1, 2,],
}"""

        data = json.loads(strip_json_comments(content))

        assert data == {"url": "http://example.com/*not-a-comment*/", "list": [1, 2]}

    def test_parse_yaml(self):
        """Test YAML parsing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "settings.yaml"
            path.write_text("extensions:\n  - .ts\n")

            assert parse_file(path) == {"extensions": [".ts"]}

    def test_parse_toml(self):
        """Test TOML parsing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "settings.toml"
            path.write_text('ripgrep = "/opt/rg"\n')

            assert parse_file(path) == {"ripgrep": "/opt/rg"}

    def test_invalid_file(self):
        """Test invalid content returns None."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "broken.json"
            path.write_text("{ not json")

            assert parse_file(path) is None

    def test_missing_file(self):
        """Test a missing file returns None."""
        assert parse_file(Path("/nonexistent/config.json")) is None


class TestLoadAliases:
    """Tests for tsconfig/jsconfig aliases."""

    def test_tsconfig_paths(self):
        """Test paths relative to baseUrl, with comments in the file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / "tsconfig.json").write_text("""{
  // generated
  "compilerOptions": {
    "baseUrl": "src",
    "paths": {
      "@/*": ["./*"],
      "@config": ["config/index.ts"],
    },
  },
}""")

            aliases = load_aliases(root)

            assert aliases == [
                AliasEntry("@/*", str(root / "src")),
                AliasEntry("@config", str(root / "src" / "config" / "index.ts")),
            ]

    def test_jsconfig_fallback(self):
        """Test jsconfig.json is used when tsconfig.json is absent."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / "jsconfig.json").write_text('{"compilerOptions": {"paths": {"~/*": ["lib/*"]}}}')

            assert load_aliases(root) == [AliasEntry("~/*", str(root / "lib"))]

    def test_no_config(self):
        """Test projects without alias configuration."""
        with tempfile.TemporaryDirectory() as tmpdir:
            assert load_aliases(Path(tmpdir)) == []


class TestLoadSettings:
    """Tests for settings loading."""

    def test_defaults(self):
        """Test defaults without any settings file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = load_settings(Path(tmpdir))

            assert settings == Settings()
            assert settings.extensions == ALLOWED_EXTENSIONS
            assert settings.ignore_patterns == IGNORE_PATTERNS

    def test_yaml_settings(self):
        """Test .exportmap.yaml values."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / ".exportmap.yaml").write_text(
                "extensions: [ts, .TSX]\n"
                "ignore:\n  - vendor/**\n"
                "aliases:\n  '@shared/*': shared\n"
                "ripgrep: /opt/bin/rg\n"
            )

            settings = load_settings(root)

            assert settings.extensions == (".ts", ".tsx")
            assert settings.ignore_patterns == ("vendor/**",)
            assert settings.aliases == (AliasEntry("@shared/*", str(root / "shared")),)
            assert settings.ripgrep == "/opt/bin/rg"
            assert settings.source == root / ".exportmap.yaml"

    def test_toml_nested_table(self):
        """Test .exportmap.toml with an [exportmap] table."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / ".exportmap.toml").write_text('[exportmap]\nextensions = [".js"]\n')

            assert load_settings(root).extensions == (".js",)

    def test_package_json_key(self):
        """Test settings under the package.json key."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / "package.json").write_text(
                json.dumps({"name": "app", "exportmap": {"ignore": ["legacy/**"]}})
            )

            assert load_settings(root).ignore_patterns == ("legacy/**",)

    def test_package_json_without_key(self):
        """Test a package.json without settings gives defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / "package.json").write_text('{"name": "app"}')

            assert load_settings(root) == Settings()

    def test_tsconfig_aliases_come_first(self):
        """Test configured aliases are appended after tsconfig aliases."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / "tsconfig.json").write_text('{"compilerOptions": {"paths": {"@/*": ["src/*"]}}}')
            (root / ".exportmap.yml").write_text("aliases:\n  '#lib': lib/index.js\n")

            settings = load_settings(root)

            assert [a.pattern for a in settings.aliases] == ["@/*", "#lib"]
