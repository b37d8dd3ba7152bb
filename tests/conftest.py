"""Shared fixtures."""

import pytest


@pytest.fixture
def artifice_home(tmp_path, monkeypatch):
    """Point ARTIFICE_HOME at a temp dir and run from an empty working directory."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("ARTIFICE_HOME", str(home))
    for var in ("ARTIFICE_AGENT", "ARTIFICE_TOOL_APPROVAL", "ARTIFICE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(work)
    return home
