"""Tests for artifice/core/conversation.py - message store and pending tool calls."""

from artifice.core.conversation import (
    AssistantMessage,
    Conversation,
    SystemMessage,
    ToolCallRequest,
    ToolMessage,
    UserMessage,
)


def _call(id="call_1", name="read", raw='{"path": "a.txt"}'):
    return ToolCallRequest.from_raw(id, name, raw)


class TestToolCallRequest:
    def test_parses_object_arguments(self):
        call = _call()
        assert call.arguments == {"path": "a.txt"}
        assert call.raw_arguments == '{"path": "a.txt"}'

    def test_non_object_json_becomes_empty(self):
        assert _call(raw="[1, 2]").arguments == {}
        assert _call(raw='"text"').arguments == {}

    def test_wire_form_keeps_raw_text(self):
        assert _call(raw='{"path": "a').to_dict() == {
            "id": "call_1",
            "type": "function",
            "function": {"name": "read", "arguments": '{"path": "a'},
        }

    def test_empty_raw_arguments_serialize_as_empty_object(self):
        assert _call(raw="").to_dict()["function"]["arguments"] == "{}"


class TestConversation:
    def test_roles_serialize(self):
        conv = Conversation()
        conv.add_system("sys")
        conv.add_user("hi")
        conv.add_assistant("hello")
        assert conv.history() == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]

    def test_assistant_with_tool_calls_and_no_text(self):
        conv = Conversation()
        conv.add_user("go")
        conv.add_assistant(None, [_call()])
        msg = conv.history()[-1]
        assert "content" not in msg
        assert msg["tool_calls"][0]["function"]["name"] == "read"

    def test_tool_results_clear_pending(self):
        conv = Conversation()
        conv.add_user("go")
        conv.add_assistant(None, [_call("a"), _call("b")])
        assert [c.id for c in conv.pending] == ["a", "b"]

        conv.add_tool_result("a", "one")
        assert [c.id for c in conv.pending] == ["b"]
        conv.add_tool_result("b", "two")
        assert conv.pending == []
        assert isinstance(conv.messages[-1], ToolMessage)
        assert conv.history()[-1] == {"role": "tool", "tool_call_id": "b", "content": "two"}

    def test_new_user_message_discards_pending(self):
        conv = Conversation()
        conv.add_user("go")
        conv.add_assistant(None, [_call("a"), _call("b")])
        conv.add_user("never mind")
        assert conv.pending == []
        assert isinstance(conv.messages[-1], UserMessage)

    def test_pop_last_user_only_removes_trailing_user(self):
        conv = Conversation()
        conv.add_user("first")
        conv.add_assistant("answer")
        assert conv.pop_last_user() is False
        conv.add_user("second")
        assert conv.pop_last_user() is True
        assert len(conv) == 2
        assert isinstance(conv.messages[-1], AssistantMessage)

    def test_remove_tool_result(self):
        conv = Conversation()
        conv.add_user("go")
        conv.add_assistant(None, [_call("a")])
        conv.add_tool_result("a", "out")
        assert conv.remove_tool_result("missing") is False
        assert conv.remove_tool_result("a") is True
        assert not any(isinstance(m, ToolMessage) for m in conv.messages)

    def test_request_messages_inject_system_prompt(self):
        conv = Conversation()
        conv.add_user("hi")
        messages = conv.request_messages("be brief")
        assert messages[0] == {"role": "system", "content": "be brief"}
        assert len(conv) == 1

    def test_request_messages_keep_existing_system(self):
        conv = Conversation()
        conv.add_system("stored")
        conv.add_user("hi")
        messages = conv.request_messages("ignored")
        assert [m["content"] for m in messages] == ["stored", "hi"]
        assert isinstance(conv.messages[0], SystemMessage)
