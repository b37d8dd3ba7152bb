"""
Agent loop: send a turn, approve and execute requested tools in order, then
send continuation turns until the model stops asking for tools.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TextIO

from .agent import Agent, AgentResponse
from .approval import ApprovalPolicy, Decision
from .colors import dim, error, tool as tool_color, warning
from .conversation import ToolCallRequest
from .transport import CancelToken
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

ARG_PREVIEW = 40


@dataclass
class LoopResult:
    text: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    error: Optional[str] = None
    cancelled: bool = False
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled


def format_tool_args(arguments: Dict[str, Any]) -> str:
    parts = []
    for key, value in arguments.items():
        if isinstance(value, str):
            shown = value if len(value) <= ARG_PREVIEW else value[:ARG_PREVIEW - 3] + "..."
            parts.append(f'{key}="{shown}"')
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            parts.append(f"{key}={value:g}")
        else:
            parts.append(f"{key}=...")
    return " ".join(parts)


def run_agent_loop(
    agent: Agent,
    prompt: str,
    registry: ToolRegistry,
    approval: ApprovalPolicy,
    on_chunk: Optional[Callable[[str], None]] = None,
    on_turn_start: Optional[Callable[[], None]] = None,
    on_turn_end: Optional[Callable[[], None]] = None,
    tool_output: bool = False,
    cancel_token: Optional[CancelToken] = None,
    stderr: Optional[TextIO] = None,
) -> LoopResult:
    err = stderr or sys.stderr
    token = cancel_token or agent.transport.cancel_token
    result = LoopResult()
    texts = []

    def send(text: str) -> AgentResponse:
        if on_turn_start:
            on_turn_start()
        try:
            return agent.send(text, on_chunk)
        finally:
            if on_turn_end:
                on_turn_end()

    def record(resp: AgentResponse) -> bool:
        if resp.cancelled:
            result.cancelled = True
            return False
        if resp.error is not None:
            err.write(error(f"Error: {resp.error}") + "\n")
            err.flush()
            result.error = resp.error
            return False
        if resp.text:
            texts.append(resp.text)
        result.input_tokens += resp.input_tokens
        result.output_tokens += resp.output_tokens
        return True

    try:
        resp = send(prompt)
        ok = record(resp)
        while ok and resp.tool_calls:
            err.write("\n")
            for call in resp.tool_calls:
                if not _handle_call(agent, registry, approval, call, tool_output, err):
                    err.write(warning("\nOperation cancelled by user.") + "\n")
                    err.flush()
                    result.aborted = True
                    return result
            if token.cancelled:
                result.cancelled = True
                break
            resp = send("")
            ok = record(resp)
    except KeyboardInterrupt:
        token.cancel()
        result.cancelled = True
    finally:
        result.text = "".join(texts)

    logger.info(
        "Loop finished: tokens in=%d out=%d cancelled=%s error=%s",
        result.input_tokens, result.output_tokens, result.cancelled, result.error,
    )
    return result


def _handle_call(
    agent: Agent,
    registry: ToolRegistry,
    approval: ApprovalPolicy,
    call: ToolCallRequest,
    tool_output: bool,
    err: TextIO,
) -> bool:
    """Approve, run, and record one tool call. False means the user aborted."""
    decision = approval.check(call)
    if decision is Decision.ABORT:
        return False

    err.write(f"{tool_color(call.name)}({format_tool_args(call.arguments)})")
    if decision is Decision.ALLOW:
        output = registry.execute(call.name, call.arguments)
        agent.conversation.add_tool_result(call.id, output)
        if tool_output:
            err.write("\n" + dim(output))
        err.write(f" → +{len(output)} chars\n")
    else:
        agent.conversation.add_tool_result(call.id, f"Tool call {call.name} was denied by user")
        err.write(" → denied\n")
    err.flush()
    return True
