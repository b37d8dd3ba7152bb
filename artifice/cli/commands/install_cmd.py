from __future__ import annotations

import sys

from ...core.colors import error, success
from ...core.config import ConfigError, install_default_config


def add_install(subparsers):
    parser = subparsers.add_parser("install", help="Write a starter config to the artifice home")
    parser.set_defaults(func=run_install)


def run_install(args, settings) -> int:
    try:
        path = install_default_config(settings.home)
    except (ConfigError, OSError) as exc:
        print(error(f"Error: {exc}"), file=sys.stderr)
        return 1
    print(success(f"Created {path}"))
    return 0
