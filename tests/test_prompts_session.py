"""Tests for artifice/core/prompts.py and artifice/core/session.py."""

import re
from pathlib import Path

import pytest

from artifice.core.prompts import add_prompt, list_prompts, load_prompt, new_prompt
from artifice.core.session import save_session


class TestPromptStore:
    def test_empty_store(self, artifice_home):
        assert list_prompts() == []
        assert load_prompt("missing") is None

    def test_new_and_load(self, artifice_home):
        path = new_prompt("reviewer", "Review carefully.")
        assert path == artifice_home / "prompts" / "reviewer.md"
        assert load_prompt("reviewer") == "Review carefully."
        assert list_prompts() == ["reviewer"]

    def test_new_keeps_md_suffix(self, artifice_home):
        assert new_prompt("terse.md", "x").name == "terse.md"

    def test_new_refuses_overwrite(self, artifice_home):
        new_prompt("a", "one")
        with pytest.raises(FileExistsError):
            new_prompt("a", "two")
        assert load_prompt("a") == "one"

    def test_add_copies_file(self, artifice_home, tmp_path):
        source = tmp_path / "coder.md"
        source.write_text("You write code.")
        dest = add_prompt(source)
        assert dest.read_text() == "You write code."
        with pytest.raises(FileExistsError):
            add_prompt(source)

    def test_add_missing_file(self, artifice_home, tmp_path):
        with pytest.raises(FileNotFoundError):
            add_prompt(tmp_path / "nope.md")

    def test_local_prompt_overrides_home(self, artifice_home):
        new_prompt("shared", "home version")
        local = Path(".artifice/prompts")
        local.mkdir(parents=True)
        (local / "shared.md").write_text("local version")
        (local / "only_local.md").write_text("x")
        assert load_prompt("shared") == "local version"
        assert list_prompts() == ["only_local", "shared"]


class TestSaveSession:
    def test_writes_markdown_transcript(self, artifice_home):
        path = save_session("What is 2+2?", None, "gpt-test", "openai", "4")
        assert path.parent == artifice_home / "sessions"
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}-\d{6}-\d{6}\.md", path.name)
        text = path.read_text()
        assert "## Model\n- **Provider**: openai\n- **Model**: gpt-test" in text
        assert "## System Prompt\n(none)" in text
        assert "## User Prompt\nWhat is 2+2?" in text
        assert text.endswith("## Response\n4\n")

    def test_unique_names(self, artifice_home):
        first = save_session("a", "sys", "m", None, "r")
        second = save_session("b", "sys", "m", None, "r")
        assert first != second
        assert "## System Prompt\nsys" in first.read_text()
