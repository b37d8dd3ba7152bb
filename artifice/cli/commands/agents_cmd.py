from __future__ import annotations

import sys

from ...core.colors import error
from ...core.config import set_default_agent


def add_agents(subparsers):
    parser = subparsers.add_parser("agents", help="List, show or set agent profiles")
    sub = parser.add_subparsers(dest="agents_command")
    sub.add_parser("list", help="List configured agents")
    sub.add_parser("current", help="Show the default agent")
    set_parser = sub.add_parser("set", help="Set the default agent")
    set_parser.add_argument("name")
    parser.set_defaults(func=run_agents, agents_command="list")


def run_agents(args, settings) -> int:
    if args.agents_command == "current":
        if not settings.agent:
            print(error("Error: No agent configured"), file=sys.stderr)
            return 1
        print(settings.agent)
        return 0

    if args.agents_command == "set":
        if args.name not in settings.agents:
            print(error(f"Unknown agent: '{args.name}'"), file=sys.stderr)
            return 1
        try:
            set_default_agent(args.name, settings.home)
        except OSError as exc:
            print(error(f"Error: {exc}"), file=sys.stderr)
            return 1
        print(f"Default agent set to '{args.name}'")
        return 0

    for name in settings.agents:
        print(name)
    return 0
