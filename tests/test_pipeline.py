"""End-to-end tests for the analysis pipeline."""

import tempfile
from pathlib import Path

import pytest

from analyzer import builder
from analyzer.builder import analyze_file, find_related_files
from analyzer.errors import (
    InputNotFoundError,
    NoExportsError,
    ProjectRootNotFoundError,
    UnsupportedFileError,
)
from analyzer.search import WalkSearch
from graph.model import DIRECT, RE_EXPORT


def _write(root, files):
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def relay_project():
    """util.ts used directly by a.ts and through b.ts by c.ts."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir).resolve()
        _write(root, {
            "package.json": "{}",
            "util.ts": "export function helper() { return 1 }\n",
            "a.ts": "import { helper } from './util'\nhelper()\n",
            "b.ts": "export { helper } from './util'\n",
            "c.ts": "import { helper } from './b'\nhelper()\n",
            "node_modules/dep/index.js": "import { helper } from '../../util'\n",
        })
        yield root


class TestAnalyzeFile:
    """Tests for analyze_file."""

    def test_no_consumers(self):
        """Test a file nobody imports."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            _write(root, {
                "package.json": "{}",
                "math.ts": (
                    "export function add(a: number, b: number) { return a + b }\n"
                    "export default class Calculator {}\n"
                ),
            })

            graph = analyze_file(root / "math.ts", engine=WalkSearch())

            assert len(graph.exports) == 2
            assert graph.connections == ()
            assert graph.file_path == root / "math.ts"

    def test_direct_and_reexport(self, relay_project):
        """Test a direct consumer and a consumer through a relay."""
        root = relay_project

        graph = analyze_file(root / "util.ts", root=root, engine=WalkSearch())

        assert [
            (c.id, c.kind, c.source.name, c.target.name, c.exported_names)
            for c in graph.connections
        ] == [
            (1, DIRECT, "util.ts", "a.ts", ("helper",)),
            (2, RE_EXPORT, "b.ts", "c.ts", ("helper",)),
        ]

    def test_idempotent(self, relay_project):
        """Test repeated runs give identical graphs."""
        root = relay_project

        first = analyze_file(root / "util.ts", root=root, engine=WalkSearch())
        second = analyze_file(root / "util.ts", root=root, engine=WalkSearch())

        assert first == second

    def test_default_import(self):
        """Test a default import under a different local name."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            _write(root, {
                "package.json": "{}",
                "src/router.js": "const router = {}\nexport default router;\n",
                "src/app.js": "import appRouter from './router.js'\n",
            })

            graph = analyze_file(root / "src" / "router.js", engine=WalkSearch())

            assert len(graph.connections) == 1
            assert graph.connections[0].target == root / "src" / "app.js"
            assert graph.connections[0].exported_names == ("router",)

    def test_commonjs(self):
        """Test require consumers of CommonJS exports."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            _write(root, {
                "package.json": "{}",
                "lib/format.js": "exports.pad = function () {}\nexports.trim = () => {}\n",
                "main.js": "const { pad } = require('./lib/format')\n",
                "other.js": "const t = require('./lib/format').trim\n",
            })

            graph = analyze_file(root / "lib" / "format.js", engine=WalkSearch())

            assert [(c.target.name, c.exported_names) for c in graph.connections] == [
                ("main.js", ("pad",)),
                ("other.js", ("trim",)),
            ]

    def test_tsconfig_alias(self):
        """Test consumers importing through a tsconfig path alias."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            _write(root, {
                "tsconfig.json": '{"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["src/*"]}}}',
                "src/shared/util.ts": "export const VERSION = '1'\n",
                "src/pages/home.tsx": "import { VERSION } from '@/shared/util'\n",
            })

            graph = analyze_file(root / "src" / "shared" / "util.ts", engine=WalkSearch())

            assert len(graph.connections) == 1
            assert graph.connections[0].kind == DIRECT
            assert graph.connections[0].target == root / "src" / "pages" / "home.tsx"

    def test_no_exports(self):
        """Test files without exports are rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            _write(root, {"package.json": "{}", "script.js": "console.log(1)\n"})

            with pytest.raises(NoExportsError):
                analyze_file(root / "script.js", engine=WalkSearch())

    def test_missing_file(self):
        """Test a missing input file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InputNotFoundError):
                analyze_file(Path(tmpdir) / "missing.ts", engine=WalkSearch())

    def test_unsupported_extension(self):
        """Test a file type outside the supported set."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            _write(root, {"package.json": "{}", "style.css": "body {}\n"})

            with pytest.raises(UnsupportedFileError):
                analyze_file(root / "style.css", engine=WalkSearch())

    def test_no_project_root(self, monkeypatch):
        """Test a file outside any project."""
        monkeypatch.setattr(builder, "find_project_root", lambda path: None)
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            _write(root, {"util.ts": "export const x = 1\n"})

            with pytest.raises(ProjectRootNotFoundError):
                analyze_file(root / "util.ts", engine=WalkSearch())


class TestFindRelatedFiles:
    """Tests for find_related_files."""

    def test_related_files(self, relay_project):
        """Test direct and relayed consumers are listed, sorted."""
        root = relay_project

        files = find_related_files(root / "util.ts", root=root, engine=WalkSearch())

        assert files == [root / "a.ts", root / "c.ts"]
