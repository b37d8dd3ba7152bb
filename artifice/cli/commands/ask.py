from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ...core.agent import Agent
from ...core.approval import ApprovalPolicy
from ...core.colors import error
from ...core.config import APPROVAL_MODES, ConfigError, resolve_agent
from ...core.prompts import load_prompt
from ...core.runner import run_agent_loop
from ...core.session import save_session
from ...core.spinner import ProgressIndicator
from ...core.transport import CancelToken, StreamingTransport
from ...tools.registry import build_default_registry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130


def add_ask(subparsers):
    parser = subparsers.add_parser("ask", help="Send a prompt to an agent and run its tool calls")
    parser.add_argument("inputs", nargs="*", metavar="PROMPT | @FILE", help="Prompt text and @file attachments")
    parser.add_argument("-a", "--agent", help="Agent profile to use")
    parser.add_argument("-p", "--prompt-name", help="Named system prompt from the prompt store")
    parser.add_argument("-s", "--system-prompt", help="System prompt text")
    parser.add_argument("--tools", help="Comma-separated tool name globs to enable")
    parser.add_argument("--tool-approval", choices=APPROVAL_MODES, help="Override the approval mode")
    parser.add_argument("--tool-output", action="store_true", help="Print tool results to stderr")
    parser.add_argument("--no-session", action="store_true", help="Do not save a session transcript")
    parser.add_argument("--logging", action="store_true", default=argparse.SUPPRESS, help="Mirror debug logs to stderr")
    parser.set_defaults(func=run_ask)


def parse_tool_patterns(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [p.strip() for p in value.split(",") if p.strip()]


def build_user_message(inputs: List[str], stdin=None) -> str:
    """Attachments first, then the prompt words, then piped stdin."""
    stdin = stdin if stdin is not None else sys.stdin
    attachments = []
    words = []
    for item in inputs:
        if item.startswith("@") and len(item) > 1:
            path = Path(item[1:]).expanduser()
            if not path.is_file():
                raise FileNotFoundError(f"File not found: {item[1:]}")
            attachments.append(f"--- {item[1:]} ---\n{path.read_text(encoding='utf-8', errors='replace')}")
        else:
            words.append(item)

    message = "\n\n".join(attachments) + "\n\n---\n\n" if attachments else ""
    message += " ".join(words)
    if not stdin.isatty():
        piped = stdin.read()
        if piped:
            message += ("\n\n" if message else "") + piped
    return message


def resolve_system_prompt(args, profile_prompt: Optional[str]) -> Optional[str]:
    if args.system_prompt:
        return args.system_prompt
    if args.prompt_name:
        text = load_prompt(args.prompt_name)
        if text is None:
            raise ConfigError(f"Unknown prompt: '{args.prompt_name}'")
        return text
    return profile_prompt


def _stdout_writer(text: str):
    sys.stdout.write(text)
    sys.stdout.flush()


def run_ask(args, settings) -> int:
    try:
        message = build_user_message(args.inputs)
    except (OSError, UnicodeDecodeError) as exc:
        print(error(f"Error: {exc}"), file=sys.stderr)
        return EXIT_ERROR
    if not message.strip():
        logger.info("Empty message, nothing to send")
        return EXIT_OK

    try:
        profile = resolve_agent(settings, args.agent)
        system_prompt = resolve_system_prompt(args, profile.system_prompt)
    except ConfigError as exc:
        print(error(f"Error: {exc}"), file=sys.stderr)
        return EXIT_ERROR

    patterns = parse_tool_patterns(args.tools) if args.tools is not None else profile.tools
    registry = build_default_registry()
    token = CancelToken()
    approval = ApprovalPolicy(args.tool_approval or settings.tool_approval, settings.tool_allowlist)

    spinner = ProgressIndicator() if sys.stderr.isatty() else None
    on_chunk = spinner.write_chunk if spinner else _stdout_writer
    logger.info("ask agent=%s model=%s tools=%s", profile.name, profile.model, patterns)

    with StreamingTransport(profile.base_url, profile.api_key, cancel_token=token) as transport:
        agent = Agent(transport, profile.model, system_prompt, registry.schemas(patterns))
        if spinner:
            spinner.start()
        try:
            with token.sigint_handler():
                result = run_agent_loop(
                    agent,
                    message,
                    registry,
                    approval,
                    on_chunk=on_chunk,
                    on_turn_start=spinner.turn_start if spinner else None,
                    on_turn_end=spinner.turn_end if spinner else None,
                    tool_output=args.tool_output,
                    cancel_token=token,
                )
        finally:
            if spinner:
                spinner.stop()

    if result.cancelled or (result.text and not result.text.endswith("\n")):
        _stdout_writer("\n")

    if result.cancelled:
        return EXIT_CANCELLED
    if result.error is not None:
        return EXIT_ERROR
    if settings.save_session and not args.no_session and not result.aborted:
        save_session(message, system_prompt, profile.model, profile.provider, result.text)
    return EXIT_OK
