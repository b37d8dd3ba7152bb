"""
Entry point for the artifice CLI.
"""
from __future__ import annotations

import argparse
import sys

from ..core.config import ConfigError, load_settings
from ..core.colors import error
from ..core.logging_utils import setup_logging
from ..cli import commands


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="artifice", description="Terminal agent for OpenAI-compatible chat models")
    parser.add_argument("--logging", action="store_true", help="Mirror debug logs to stderr")
    subparsers = parser.add_subparsers(dest="command")
    commands.register(subparsers)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings()
    except ConfigError as exc:
        print(error(f"Error: {exc}"), file=sys.stderr)
        return 1
    setup_logging(settings, verbose=args.logging)
    return commands.dispatch(args, settings)


if __name__ == "__main__":
    sys.exit(main())
