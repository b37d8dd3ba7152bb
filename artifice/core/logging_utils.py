"""
Logging setup for artifice.
Always logs to a file under the artifice home; mirrors to stderr when verbose.
"""
from __future__ import annotations

import logging

from .config import Settings


def setup_logging(settings: Settings, verbose: bool = False):
    log_dir = settings.home / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "artifice.log"

    handlers = [logging.FileHandler(log_file, encoding="utf-8")]
    if verbose:
        handlers.append(logging.StreamHandler())

    fmt = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)
    # httpx logs every request at INFO; keep it out of the transcript unless debugging.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger(__name__).info("Logging initialized at %s", log_file)
