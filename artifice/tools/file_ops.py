from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

MAX_READ_BYTES = 1024 * 1024

logger = logging.getLogger(__name__)


def resolve_path(path_str: str) -> Path:
    """Absolute form of a user path; `~` is expanded and the file need not exist."""
    return Path(path_str).expanduser().resolve()


def display_path(path: Path) -> str:
    """Path relative to the current directory when it lies beneath it."""
    try:
        return str(path.relative_to(Path.cwd().resolve()))
    except ValueError:
        return str(path)


def count_lines(text: str) -> int:
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


def _json(result: Dict[str, Any]) -> str:
    return json.dumps(result)


def _failure(message: str, **extra: Any) -> str:
    return _json({"success": False, "error": message, **extra})


def _string_arg(args: Dict[str, Any], key: str):
    value = args.get(key)
    return value if isinstance(value, str) else None


def _int_arg(args: Dict[str, Any], key: str) -> int:
    value = args.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def tool_read(args: Dict[str, Any]) -> str:
    path_arg = _string_arg(args, "path")
    if path_arg is None:
        return "Error: 'path' parameter required"

    target = resolve_path(path_arg)
    shown = display_path(target)
    offset = max(0, _int_arg(args, "offset"))
    limit = _int_arg(args, "limit")

    if not target.exists():
        return f"Error: File not found: {shown}"
    if not target.is_file():
        return f"Error: Not a regular file: {shown}"
    size = target.stat().st_size
    if size > MAX_READ_BYTES:
        return f"Error: File too large ({size} bytes): {shown}"

    try:
        content = target.read_bytes().decode("utf-8", errors="replace")
    except OSError as exc:
        logger.warning("read failed for %s: %s", target, exc)
        return "Error: Could not read file"

    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    window = lines[offset:offset + limit] if limit > 0 else lines[offset:]
    if not window:
        return "(empty file)"
    return "".join(f"{offset + i + 1:4d} | {line}\n" for i, line in enumerate(window))


def tool_write(args: Dict[str, Any]) -> str:
    path_arg = _string_arg(args, "path")
    content = _string_arg(args, "content")
    if path_arg is None:
        return _failure("'path' parameter required")
    if content is None:
        return _failure("'content' parameter required")

    target = resolve_path(path_arg)
    shown = display_path(target)
    is_new = not target.exists()
    old_lines = 0
    if not is_new and target.is_file():
        try:
            old_lines = count_lines(target.read_bytes().decode("utf-8", errors="replace"))
        except OSError:
            old_lines = 0

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as exc:
        logger.warning("write failed for %s: %s", target, exc)
        return _failure(f"Cannot write: {shown}")

    return _json({
        "success": True,
        "path": shown,
        "old_lines": old_lines,
        "new_lines": count_lines(content),
        "is_new_file": is_new,
        "error": None,
    })


def tool_edit(args: Dict[str, Any]) -> str:
    path_arg = _string_arg(args, "path")
    old_string = _string_arg(args, "old_string")
    new_string = _string_arg(args, "new_string")
    if path_arg is None or old_string is None or new_string is None:
        return _failure("path, old_string, and new_string required")
    if not old_string:
        return _failure("old_string must not be empty")

    target = resolve_path(path_arg)
    shown = display_path(target)
    if not target.exists():
        return _failure(f"File not found: {shown}")
    if not target.is_file():
        return _failure(f"Not a regular file: {shown}")

    try:
        content = target.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("edit could not read %s: %s", target, exc)
        return _failure("Could not read file")

    count = content.count(old_string)
    if count == 0:
        return _failure(f"String not found in {shown}", count=0)
    if count > 1:
        return _failure(
            f"String found {count} times in {shown}. "
            "Provide a more specific string with surrounding context.",
            count=count,
        )

    index = content.index(old_string)
    updated = content[:index] + new_string + content[index + len(old_string):]
    try:
        with target.open("w", encoding="utf-8", newline="") as f:
            f.write(updated)
    except OSError as exc:
        logger.warning("edit could not write %s: %s", target, exc)
        return _failure("Could not write file")

    return _json({
        "success": True,
        "path": shown,
        "start_line": content.count("\n", 0, index) + 1,
        "old_line_count": old_string.count("\n") + 1,
        "new_line_count": new_string.count("\n") + 1,
        "error": None,
    })


def make():
    path_param = {"type": "string", "description": "Absolute or relative file path."}
    specs = {
        "read": {
            "description": "Read the contents of a file.",
            "parameters": {
                "type": "object",
                "properties": {
                    "path": path_param,
                    "offset": {"type": "integer", "description": "Line number to start reading from (0-based)."},
                    "limit": {"type": "integer", "description": "Maximum number of lines to read."},
                },
                "required": ["path"],
            },
        },
        "write": {
            "description": "Write or create a file with the given content.",
            "parameters": {
                "type": "object",
                "properties": {
                    "path": path_param,
                    "content": {"type": "string", "description": "Content to write to the file."},
                },
                "required": ["path", "content"],
            },
        },
        "edit": {
            "description": "Replace a unique string in a file with a new string. The old_string must appear exactly once.",
            "parameters": {
                "type": "object",
                "properties": {
                    "path": path_param,
                    "old_string": {"type": "string", "description": "The exact text to find and replace. Must be unique."},
                    "new_string": {"type": "string", "description": "The replacement text."},
                },
                "required": ["path", "old_string", "new_string"],
            },
        },
    }
    return specs, {"read": tool_read, "write": tool_write, "edit": tool_edit}
