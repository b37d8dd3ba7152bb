from __future__ import annotations

import sys

from .ask import add_ask
from .agents_cmd import add_agents
from .prompts_cmd import add_prompts
from .install_cmd import add_install
from .exec_cmd import add_exec


def register(subparsers):
    add_ask(subparsers)
    add_agents(subparsers)
    add_prompts(subparsers)
    add_install(subparsers)
    add_exec(subparsers)


def dispatch(args, settings) -> int:
    if not hasattr(args, "func"):
        print("No command provided", file=sys.stderr)
        return 1
    return args.func(args, settings)
