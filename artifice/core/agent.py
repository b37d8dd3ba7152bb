"""
Agent: one request/response turn against the streaming endpoint, with the
conversation mutation rules applied around it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .conversation import Conversation, ToolCallRequest
from .protocol import DeltaAccumulator, build_request
from .transport import StreamingTransport


@dataclass
class AgentResponse:
    text: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    error: Optional[str] = None
    cancelled: bool = False

    @property
    def failed(self) -> bool:
        return self.cancelled or self.error is not None


class Agent:
    def __init__(
        self,
        transport: StreamingTransport,
        model: str,
        system_prompt: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        conversation: Optional[Conversation] = None,
    ):
        self.transport = transport
        self.model = model
        self.system_prompt = system_prompt
        self.tools = tools or []
        self.conversation = conversation or Conversation()
        self.logger = logging.getLogger(__name__)

    def send(self, prompt: str = "", on_chunk: Optional[Callable[[str], None]] = None) -> AgentResponse:
        """Send one turn. An empty prompt is a continuation after tool results.

        On failure or cancellation the user message added for `prompt` is
        retracted, leaving the conversation as it was before the call.
        """
        if prompt:
            self.conversation.add_user(prompt)

        body = build_request(
            self.model,
            self.conversation.request_messages(self.system_prompt),
            self.tools,
        )
        acc = DeltaAccumulator(on_text=on_chunk)
        result = self.transport.stream(body, acc.feed_payload)

        if not result.ok:
            if prompt:
                self.conversation.pop_last_user()
            if result.cancelled:
                self.logger.info("Turn cancelled")
                return AgentResponse(cancelled=True)
            self.logger.error("Send failed: %s", result.error)
            return AgentResponse(error=result.error or "unknown error")

        turn = acc.finish()
        if turn.tool_calls:
            self.conversation.add_assistant(turn.text or None, turn.tool_calls)
        elif turn.text:
            self.conversation.add_assistant(turn.text)
        self.logger.info(
            "Turn complete: %d chars, %d tool call(s), tokens in=%d out=%d",
            len(turn.text), len(turn.tool_calls), turn.input_tokens, turn.output_tokens,
        )
        return AgentResponse(
            text=turn.text,
            tool_calls=turn.tool_calls,
            input_tokens=turn.input_tokens,
            output_tokens=turn.output_tokens,
        )
