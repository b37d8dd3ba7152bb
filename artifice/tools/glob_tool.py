from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from .file_ops import display_path, resolve_path

MAX_COLLECTED = 200
MAX_DISPLAYED = 100


def find_matches(base: Path, pattern: str, limit: int = MAX_COLLECTED) -> List[Path]:
    """Regular files under `base` matching `pattern`, sorted by relative path.

    `*` stays within one path segment and `**` spans directories. Anything
    reached through a symlink is skipped.
    """
    base = base.resolve()
    matches = []
    for path in base.glob(pattern):
        if path.resolve() != path or not path.is_file():
            continue
        matches.append(path)
    matches.sort(key=lambda p: p.relative_to(base).as_posix())
    return matches[:limit]


def tool_glob(args: Dict[str, Any]) -> str:
    pattern = args.get("pattern")
    if not isinstance(pattern, str) or not pattern:
        return "Error: 'pattern' parameter required"
    base_arg = args.get("path")
    base = resolve_path(base_arg if isinstance(base_arg, str) else ".")

    try:
        matches = find_matches(base, pattern)
    except (ValueError, NotImplementedError) as exc:
        return f"Error: Invalid pattern '{pattern}': {exc}"
    if not matches:
        return f"No files matching '{pattern}' in {display_path(base)}"

    shown = [display_path(p) for p in matches[:MAX_DISPLAYED]]
    text = "\n".join(shown)
    if len(matches) > MAX_DISPLAYED:
        text += f"\n... and {len(matches) - MAX_DISPLAYED} more"
    return text


def make():
    specs = {
        "glob": {
            "description": "Search for files matching a glob pattern.",
            "parameters": {
                "type": "object",
                "properties": {
                    "pattern": {"type": "string", "description": "Glob pattern (supports ** for recursive)."},
                    "path": {"type": "string", "description": "Directory to search in (default: current directory)."},
                },
                "required": ["pattern"],
            },
        },
    }
    return specs, {"glob": tool_glob}
