"""
Chat-completions streaming protocol: request body, per-event decoding, and
accumulation of deltas into a finished turn.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .conversation import ToolCallRequest

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """A single event payload could not be decoded."""


@dataclass
class ToolCallFragment:
    index: int
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: Optional[str] = None


@dataclass
class Delta:
    content: Optional[str] = None
    tool_call: Optional[ToolCallFragment] = None
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Turn:
    text: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0


def build_request(model: str, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "model": model,
        "stream": True,
        "stream_options": {"include_usage": True},
        "messages": messages,
    }
    if tools:
        body["tools"] = tools
        body["tool_choice"] = "auto"
    return body


def _int_field(obj: Dict[str, Any], key: str) -> int:
    value = obj.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def _str_field(obj: Any, key: str) -> Optional[str]:
    if not isinstance(obj, dict):
        return None
    value = obj.get(key)
    return value if isinstance(value, str) else None


def decode_delta(payload: Union[bytes, str]) -> Delta:
    """Decode one `data:` payload. Only the first choice is considered."""
    try:
        root = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"invalid event payload: {exc}") from exc
    if not isinstance(root, dict):
        raise DecodeError("event payload is not an object")

    delta = Delta()
    usage = root.get("usage")
    if isinstance(usage, dict):
        delta.input_tokens = _int_field(usage, "prompt_tokens")
        delta.output_tokens = _int_field(usage, "completion_tokens")

    choices = root.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return delta
    update = choices[0].get("delta")
    if not isinstance(update, dict):
        return delta

    delta.content = _str_field(update, "content")

    tool_calls = update.get("tool_calls")
    if isinstance(tool_calls, list) and tool_calls and isinstance(tool_calls[0], dict):
        tc = tool_calls[0]
        index = tc.get("index")
        if isinstance(index, int) and not isinstance(index, bool) and index >= 0:
            fn = tc.get("function")
            delta.tool_call = ToolCallFragment(
                index=index,
                id=_str_field(tc, "id"),
                name=_str_field(fn, "name"),
                arguments=_str_field(fn, "arguments"),
            )
    return delta


@dataclass
class _Slot:
    id: List[str] = field(default_factory=list)
    name: List[str] = field(default_factory=list)
    arguments: List[str] = field(default_factory=list)


class DeltaAccumulator:
    """Merge streamed deltas into a complete turn.

    Text fragments go to `on_text` as they arrive and are kept for the final
    turn. Tool-call slots are created densely up to the highest index seen;
    fragment strings are only ever appended to their slot.
    """

    def __init__(self, on_text: Optional[Callable[[str], None]] = None):
        self.on_text = on_text
        self._text: List[str] = []
        self._slots: List[_Slot] = []
        self.input_tokens = 0
        self.output_tokens = 0
        self.skipped = 0

    def feed_payload(self, payload: bytes):
        try:
            delta = decode_delta(payload)
        except DecodeError as exc:
            self.skipped += 1
            logger.debug("Skipping event: %s", exc)
            return
        self.feed(delta)

    def feed(self, delta: Delta):
        if delta.content:
            self._text.append(delta.content)
            if self.on_text:
                self.on_text(delta.content)

        fragment = delta.tool_call
        if fragment is not None:
            while len(self._slots) <= fragment.index:
                self._slots.append(_Slot())
            slot = self._slots[fragment.index]
            if fragment.id:
                slot.id.append(fragment.id)
            if fragment.name:
                slot.name.append(fragment.name)
            if fragment.arguments:
                slot.arguments.append(fragment.arguments)

        if delta.input_tokens:
            self.input_tokens = delta.input_tokens
        if delta.output_tokens:
            self.output_tokens = delta.output_tokens

    @property
    def text(self) -> str:
        return "".join(self._text)

    def finish(self) -> Turn:
        calls = [
            ToolCallRequest.from_raw("".join(s.id), "".join(s.name), "".join(s.arguments))
            for s in self._slots
        ]
        return Turn(
            text=self.text,
            tool_calls=calls,
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
        )
