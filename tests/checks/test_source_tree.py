"""Tests for source file discovery and unreadable-file handling end to end."""

import os

from qualitygate.checks import build_default_registry
from qualitygate.checks.source_tree import SourceTree
from qualitygate.config.settings import GateSettings
from qualitygate.core.gate import run_gate
from qualitygate.core.ratchet import InMemoryRatchetStore


class TestSourceTree:
    def test_skips_dangling_symlink(self, make_tree):
        root = make_tree({"a.py": "x = 1\n"})
        os.symlink(root / "src" / "nowhere.py", root / "src" / "broken.py")

        tree = SourceTree(base=root, roots=[root / "src"])

        assert [tree.display(p) for p in tree.files()] == ["src/a.py"]

    def test_follows_symlink_to_file(self, make_tree):
        root = make_tree({"a.py": "x = 1\n"})
        os.symlink(root / "src" / "a.py", root / "src" / "alias.py")

        tree = SourceTree(base=root, roots=[root / "src"])

        assert [tree.display(p) for p in tree.files()] == ["src/a.py", "src/alias.py"]

    def test_directory_with_source_suffix_is_not_a_file(self, make_tree):
        root = make_tree({"a.py": "x = 1\n", "pkg.js/index.js": "let x;\n"})

        tree = SourceTree(base=root, roots=[root / "src"])

        assert [tree.display(p) for p in tree.files()] == ["src/a.py", "src/pkg.js/index.js"]


class TestDanglingSymlinkGate:
    def test_builtin_checks_score_the_readable_files(self, make_tree):
        root = make_tree({"a.py": "x = 1\n"})
        os.symlink(root / "src" / "nowhere.py", root / "src" / "broken.py")

        outcome = run_gate(
            build_default_registry(GateSettings(root=root)), InMemoryRatchetStore()
        )

        assert [r.score for r in outcome.report.results] == [100, 100, 100]
        assert not any(r.result.is_crash for r in outcome.report.results)
        assert outcome.passed is True
