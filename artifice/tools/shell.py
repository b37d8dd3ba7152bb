"""
Shell tool: run a command under /bin/sh with a wall-clock deadline and an
output cap, capturing stdout and stderr together.
"""
from __future__ import annotations

import json
import logging
import os
import selectors
import signal
import subprocess
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import psutil

DEFAULT_TIMEOUT = 30
MAX_TIMEOUT = 300
MAX_OUTPUT = 512 * 1024
POLL_INTERVAL = 0.1
READ_SIZE = 65536

logger = logging.getLogger(__name__)


@dataclass
class SubprocessRun:
    command: str
    timeout: float
    max_output: int
    output: bytes = b""
    exit_code: int = -1
    truncated: bool = False
    timed_out: bool = False

    @property
    def text(self) -> str:
        return self.output.decode("utf-8", errors="replace")


def kill_tree(proc: subprocess.Popen):
    """SIGKILL the child, everything it spawned, and any orphans left in its session."""
    try:
        parent = psutil.Process(proc.pid)
        victims = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        victims = []
    for victim in victims:
        try:
            victim.kill()
        except psutil.NoSuchProcess:
            pass
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


def run_sandboxed(command: str, timeout: float = DEFAULT_TIMEOUT, max_output: int = MAX_OUTPUT) -> SubprocessRun:
    run = SubprocessRun(command=command, timeout=timeout, max_output=max_output)
    buf = bytearray()
    deadline = time.monotonic() + timeout

    proc = subprocess.Popen(
        ["/bin/sh", "-c", command],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        start_new_session=True,
    )
    logger.info("shell pid=%s timeout=%ss cmd=%s", proc.pid, timeout, command)
    fd = proc.stdout.fileno()
    os.set_blocking(fd, False)
    sel = selectors.DefaultSelector()
    sel.register(fd, selectors.EVENT_READ)
    killed = False
    try:
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                kill_tree(proc)
                killed = True
                run.truncated = run.timed_out = True
                logger.info("shell pid=%s killed after %ss deadline", proc.pid, timeout)
                break
            if not sel.select(min(remaining, POLL_INTERVAL)):
                continue
            try:
                data = os.read(fd, READ_SIZE)
            except BlockingIOError:
                continue
            if not data:
                break
            if len(buf) + len(data) > max_output:
                buf += data[:max_output - len(buf)]
                kill_tree(proc)
                killed = True
                run.truncated = True
                logger.info("shell pid=%s killed at %d byte output cap", proc.pid, max_output)
                break
            buf += data

        if not killed:
            # Pipe closed but the child may still be running.
            try:
                proc.wait(timeout=max(0.0, deadline - time.monotonic()))
            except subprocess.TimeoutExpired:
                kill_tree(proc)
                run.truncated = run.timed_out = True
    finally:
        sel.close()
        proc.stdout.close()
        if proc.poll() is None:
            kill_tree(proc)
        proc.wait()

    run.output = bytes(buf)
    run.exit_code = proc.returncode if proc.returncode >= 0 else -1
    return run


def _clamp_timeout(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_TIMEOUT
    return max(1, min(int(value), MAX_TIMEOUT))


def tool_shell(args: Dict[str, Any]) -> str:
    command = args.get("command")
    if not isinstance(command, str):
        return json.dumps({"exit_code": -1, "stdout": "", "error": "'command' parameter required"})

    timeout = _clamp_timeout(args.get("timeout"))
    try:
        run = run_sandboxed(command, timeout=timeout)
    except OSError as exc:
        logger.warning("shell spawn failed: %s", exc)
        return json.dumps({"exit_code": -1, "stdout": "", "error": f"spawn failed: {exc}"})

    result: Dict[str, Optional[Any]] = {"exit_code": run.exit_code, "stdout": run.text}
    if run.timed_out:
        result["note"] = f"Command timed out after {timeout}s"
    elif run.truncated:
        result["note"] = "Output was truncated"
    result["error"] = None
    return json.dumps(result)


def make():
    specs = {
        "shell": {
            "description": (
                "Execute a shell command and return its output (stdout and stderr combined). "
                "Use for running tests, builds, git commands, etc."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "command": {"type": "string", "description": "Shell command to execute."},
                    "timeout": {"type": "integer", "description": "Timeout in seconds (default: 30, max: 300)."},
                },
                "required": ["command"],
            },
        },
    }
    return specs, {"shell": tool_shell}
