"""
Session transcripts: one markdown file per successful run.
"""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import home_dir

logger = logging.getLogger(__name__)


def save_session(
    prompt: str,
    system_prompt: Optional[str],
    model: str,
    provider: Optional[str],
    response: str,
    home: Optional[Path] = None,
) -> Optional[Path]:
    sessions = (home or home_dir()) / "sessions"
    now = datetime.now()
    stamp = f"{now:%Y-%m-%d-%H%M%S}-{now.microsecond:06d}"
    path = sessions / f"{stamp}.md"
    body = (
        f"# Session: {stamp}\n\n"
        "## Model\n"
        f"- **Provider**: {provider or 'default'}\n"
        f"- **Model**: {model}\n\n"
        f"## System Prompt\n{system_prompt or '(none)'}\n\n"
        f"## User Prompt\n{prompt}\n\n"
        f"## Response\n{response}\n"
    )
    try:
        sessions.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not save session %s: %s", path, exc)
        return None
    logger.info("Saved session to %s", path)
    return path
