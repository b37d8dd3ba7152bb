"""
Named system prompts stored as markdown files.
Local ./.artifice/prompts entries override ~/.artifice/prompts ones by name.
"""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional

from .config import home_dir, local_dir


def prompt_dirs() -> List[Path]:
    return [local_dir() / "prompts", home_dir() / "prompts"]


def list_prompts() -> List[str]:
    names: List[str] = []
    for directory in prompt_dirs():
        if not directory.is_dir():
            continue
        for path in sorted(directory.glob("*.md")):
            if path.stem and path.stem not in names:
                names.append(path.stem)
    return names


def load_prompt(name: str) -> Optional[str]:
    for directory in prompt_dirs():
        path = directory / f"{name}.md"
        if path.is_file():
            return path.read_text(encoding="utf-8")
    return None


def add_prompt(source: Path) -> Path:
    if not source.is_file():
        raise FileNotFoundError(f"File not found: {source}")
    dest_dir = home_dir() / "prompts"
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / source.name
    if dest.exists():
        raise FileExistsError(f"Prompt already exists: {dest}")
    shutil.copyfile(source, dest)
    return dest


def new_prompt(name: str, content: str) -> Path:
    dest_dir = home_dir() / "prompts"
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / (name if name.endswith(".md") else f"{name}.md")
    if dest.exists():
        raise FileExistsError(f"Prompt already exists: {dest}")
    dest.write_text(content, encoding="utf-8")
    return dest
