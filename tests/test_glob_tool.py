"""Tests for artifice/tools/glob_tool.py - path globbing."""

import os

import pytest

from artifice.tools.glob_tool import MAX_DISPLAYED, find_matches, tool_glob


@pytest.fixture
def tree(tmp_path, monkeypatch):
    for rel in ("a.py", "b.txt", "src/c.py", "src/pkg/d.py", "docs/e.md"):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rel)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestPatternSemantics:
    @pytest.mark.parametrize("pattern, expected", [
        ("*.py", ["a.py"]),
        ("**/*.py", ["a.py", "src/c.py", "src/pkg/d.py"]),
        ("src/*/*.py", ["src/pkg/d.py"]),
        ("?.txt", ["b.txt"]),
        ("[ab].*", ["a.py", "b.txt"]),
        ("[!ab].*", []),
        ("[^a].*", ["a.py"]),
    ])
    def test_matching(self, tree, pattern, expected):
        assert [p.relative_to(tree.resolve()).as_posix() for p in find_matches(tree, pattern)] == expected

    def test_directories_are_not_results(self, tree):
        assert find_matches(tree, "*") == [tree.resolve() / "a.py", tree.resolve() / "b.txt"]


class TestToolGlob:
    def test_top_level_only(self, tree):
        assert tool_glob({"pattern": "*.py"}) == "a.py"

    def test_recursive_sorted(self, tree):
        assert tool_glob({"pattern": "**/*.py"}).splitlines() == ["a.py", "src/c.py", "src/pkg/d.py"]

    def test_base_directory(self, tree):
        assert tool_glob({"pattern": "*.py", "path": "src"}) == "src/c.py"

    def test_no_matches(self, tree):
        assert tool_glob({"pattern": "*.rs"}) == "No files matching '*.rs' in ."

    def test_pattern_required(self):
        assert tool_glob({}) == "Error: 'pattern' parameter required"

    def test_overflow_suffix(self, tmp_path, monkeypatch):
        for i in range(MAX_DISPLAYED + 5):
            (tmp_path / f"f{i:03d}.log").write_text("")
        monkeypatch.chdir(tmp_path)
        lines = tool_glob({"pattern": "*.log"}).split("\n")
        assert len(lines) == MAX_DISPLAYED + 1
        assert lines[-1] == "... and 5 more"

    def test_symlinks_are_skipped(self, tree):
        os.symlink(tree / "a.py", tree / "link.py")
        assert tool_glob({"pattern": "*.py"}) == "a.py"


def test_find_matches_respects_limit(tree):
    assert len(find_matches(tree, "**/*", limit=2)) == 2


def test_symlinked_directories_are_skipped(tree):
    os.symlink(tree / "src", tree / "mirror")
    assert tool_glob({"pattern": "**/*.py"}).splitlines() == ["a.py", "src/c.py", "src/pkg/d.py"]
    assert tool_glob({"pattern": "mirror/*.py"}).startswith("No files matching")


def test_absolute_pattern_is_reported(tree):
    assert tool_glob({"pattern": "/etc/*"}).startswith("Error: Invalid pattern '/etc/*'")
