from __future__ import annotations

import sys
from pathlib import Path

from ...core.colors import error
from ...core.prompts import add_prompt, list_prompts, new_prompt


def add_prompts(subparsers):
    parser = subparsers.add_parser("prompts", help="Manage named system prompts")
    sub = parser.add_subparsers(dest="prompts_command")
    sub.add_parser("list", help="List available prompts")
    add_parser = sub.add_parser("add", help="Copy a markdown file into the prompt store")
    add_parser.add_argument("file")
    new_parser = sub.add_parser("new", help="Create a prompt from stdin")
    new_parser.add_argument("name")
    parser.set_defaults(func=run_prompts, prompts_command="list")


def run_prompts(args, settings) -> int:
    try:
        if args.prompts_command == "add":
            dest = add_prompt(Path(args.file).expanduser())
            print(f"Added prompt: {dest}")
        elif args.prompts_command == "new":
            if sys.stdin.isatty():
                print(f"Enter prompt content for '{args.name}'. Press Ctrl-D to save.", file=sys.stderr)
            dest = new_prompt(args.name, sys.stdin.read())
            print(f"Created prompt: {dest}")
        else:
            for name in list_prompts():
                print(name)
    except OSError as exc:
        print(error(f"Error: {exc}"), file=sys.stderr)
        return 1
    return 0
