"""
Tool approval policy: auto/deny modes, allowlist globs, session "always"
grants, and the interactive confirmation prompt.
"""
from __future__ import annotations

import json
import logging
import sys
from enum import Enum
from fnmatch import fnmatchcase
from typing import Iterable, Optional, Set, TextIO

from .colors import tool as tool_color, warning
from .conversation import ToolCallRequest


class ApprovalMode(str, Enum):
    ASK = "ask"
    AUTO = "auto"
    DENY = "deny"


class Decision(Enum):
    ALLOW = "allow"
    DENY = "deny"
    ABORT = "abort"


PROMPT = "\nApprove this tool call? [Y]es [N]o [A]lways [C]ancel: "


class ApprovalPolicy:
    def __init__(
        self,
        mode: ApprovalMode | str = ApprovalMode.ASK,
        allowlist: Optional[Iterable[str]] = None,
        stdin: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.mode = ApprovalMode(mode)
        self.allowlist = list(allowlist or [])
        self.always_allowed: Set[str] = set()
        self.stdin = stdin
        self.stderr = stderr
        self.logger = logging.getLogger(__name__)

    def is_allowed(self, name: str) -> bool:
        """Non-interactive part of the policy."""
        if self.mode is ApprovalMode.AUTO:
            return True
        if self.mode is ApprovalMode.DENY:
            return False
        if any(fnmatchcase(name, pat) for pat in self.allowlist):
            return True
        return name in self.always_allowed

    def check(self, call: ToolCallRequest) -> Decision:
        if self.is_allowed(call.name):
            return Decision.ALLOW
        if self.mode is ApprovalMode.DENY:
            self.logger.info("Tool %s denied by mode", call.name)
            return Decision.DENY
        return self._ask(call)

    def _ask(self, call: ToolCallRequest) -> Decision:
        out = self.stderr or sys.stderr
        inp = self.stdin or sys.stdin
        out.write(f"\nTool Call: {tool_color(call.name)}\n")
        out.write(f"   Arguments: {json.dumps(call.arguments, indent=2)}\n")

        while True:
            out.write(PROMPT)
            out.flush()
            line = inp.readline()
            if not line:
                out.write("\nOperation cancelled.\n")
                out.flush()
                return Decision.ABORT

            answer = line.lstrip()[:1].lower()
            if answer == "y":
                return Decision.ALLOW
            if answer == "n":
                return Decision.DENY
            if answer == "a":
                self.always_allowed.add(call.name)
                self.logger.info("Tool %s always allowed for this session", call.name)
                return Decision.ALLOW
            if answer == "c":
                return Decision.ABORT
            out.write(warning("Invalid response. Please enter Y, N, A, or C.") + "\n")
