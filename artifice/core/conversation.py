"""
Conversation utilities: message store, role helpers, and pending tool-call tracking.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


SYSTEM_ROLE = "system"
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
TOOL_ROLE = "tool"

logger = logging.getLogger(__name__)


@dataclass
class ToolCallRequest:
    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    raw_arguments: str = ""

    @classmethod
    def from_raw(cls, id: str, name: str, raw_arguments: str) -> "ToolCallRequest":
        """Parse accumulated argument text; anything but a JSON object becomes {}."""
        try:
            parsed = json.loads(raw_arguments)
        except (json.JSONDecodeError, TypeError):
            parsed = None
        if not isinstance(parsed, dict):
            logger.debug("Unparseable arguments for tool %s: %r", name, raw_arguments)
            parsed = {}
        return cls(id=id, name=name, arguments=parsed, raw_arguments=raw_arguments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.raw_arguments or "{}"},
        }


@dataclass
class SystemMessage:
    content: str
    role: str = field(default=SYSTEM_ROLE, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass
class UserMessage:
    content: str
    role: str = field(default=USER_ROLE, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass
class AssistantMessage:
    content: Optional[str] = None
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    role: str = field(default=ASSISTANT_ROLE, init=False)

    def to_dict(self) -> Dict[str, Any]:
        msg: Dict[str, Any] = {"role": self.role}
        if self.content is not None:
            msg["content"] = self.content
        if self.tool_calls:
            msg["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        return msg


@dataclass
class ToolMessage:
    tool_call_id: str
    content: str
    role: str = field(default=TOOL_ROLE, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "tool_call_id": self.tool_call_id, "content": self.content}


Message = Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage]


class Conversation:
    """Ordered message log plus the tool calls still awaiting a result.

    History is append-only except for two removals: retracting a trailing user
    message after a failed send, and dropping a tool message by call id.
    """

    def __init__(self):
        self.messages: List[Message] = []
        self.pending: List[ToolCallRequest] = []

    def __len__(self) -> int:
        return len(self.messages)

    def add_system(self, content: str):
        self.messages.append(SystemMessage(content))

    def add_user(self, content: str):
        if self.pending:
            logger.debug("Discarding %d pending tool call(s)", len(self.pending))
            self.pending = []
        self.messages.append(UserMessage(content))

    def add_assistant(self, content: Optional[str], tool_calls: Optional[List[ToolCallRequest]] = None):
        calls = list(tool_calls or [])
        self.messages.append(AssistantMessage(content=content, tool_calls=calls))
        if calls:
            self.pending = list(calls)

    def add_tool_result(self, tool_call_id: str, content: str):
        self.messages.append(ToolMessage(tool_call_id=tool_call_id, content=content))
        for i, call in enumerate(self.pending):
            if call.id == tool_call_id:
                del self.pending[i]
                break

    def pop_last_user(self) -> bool:
        if self.messages and isinstance(self.messages[-1], UserMessage):
            self.messages.pop()
            return True
        return False

    def remove_tool_result(self, tool_call_id: str) -> bool:
        for i, msg in enumerate(self.messages):
            if isinstance(msg, ToolMessage) and msg.tool_call_id == tool_call_id:
                del self.messages[i]
                return True
        return False

    def history(self) -> List[Dict]:
        return [m.to_dict() for m in self.messages]

    def request_messages(self, system_prompt: Optional[str] = None) -> List[Dict]:
        """History as sent on the wire, with the system prompt injected up front."""
        messages = self.history()
        if system_prompt and not (self.messages and isinstance(self.messages[0], SystemMessage)):
            messages.insert(0, SystemMessage(system_prompt).to_dict())
        return messages
