"""
ANSI color helpers for the diagnostic stream.
Colors only apply when stderr is a TTY; stdout carries model text untouched.
"""
import sys


class Colors:
    """ANSI codes used by the CLI and the progress indicator."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"

    SAVE_CURSOR = "\033[s"
    RESTORE_CURSOR = "\033[u"
    HIDE_CURSOR = "\033[?25l"
    SHOW_CURSOR = "\033[?25h"


def is_tty() -> bool:
    return sys.stderr.isatty()


def colorize(text: str, color: str, bold: bool = False) -> str:
    """Wrap `text` in `color` (plus bold) and a reset, or return it as is off a terminal."""
    if not is_tty():
        return text

    prefix = Colors.BOLD if bold else ""
    return f"{prefix}{color}{text}{Colors.RESET}"


def dim(text: str) -> str:
    # Echoed tool results.
    if not is_tty():
        return text
    return f"{Colors.DIM}{text}{Colors.RESET}"


def success(text: str) -> str:
    return colorize(text, Colors.GREEN)


def error(text: str) -> str:
    return colorize(text, Colors.RED, bold=True)


def warning(text: str) -> str:
    return colorize(text, Colors.YELLOW)


def tool(text: str) -> str:
    """Tool name as shown on the approval and progress lines."""
    return colorize(text, Colors.MAGENTA)
