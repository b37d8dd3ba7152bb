"""Tests for artifice/core/approval.py - modes, allowlist globs and the prompt."""

import io

import pytest

from artifice.core.approval import PROMPT, ApprovalMode, ApprovalPolicy, Decision
from artifice.core.conversation import ToolCallRequest


def _call(name="shell"):
    return ToolCallRequest.from_raw("call_1", name, '{"command": "ls"}')


def _policy(mode="ask", answers="", allowlist=None):
    out = io.StringIO()
    policy = ApprovalPolicy(mode, allowlist, stdin=io.StringIO(answers), stderr=out)
    return policy, out


class TestModes:
    def test_auto_allows_everything(self):
        policy, out = _policy("auto")
        assert policy.check(_call()) is Decision.ALLOW
        assert out.getvalue() == ""

    def test_deny_rejects_without_prompting(self):
        policy, out = _policy("deny", answers="y\n", allowlist=["*"])
        assert policy.check(_call()) is Decision.DENY
        assert out.getvalue() == ""

    def test_unknown_mode_is_rejected(self):
        with pytest.raises(ValueError):
            ApprovalPolicy("sometimes")

    def test_mode_accepts_enum(self):
        assert ApprovalPolicy(ApprovalMode.AUTO).mode is ApprovalMode.AUTO


class TestAllowlist:
    def test_glob_matches_skip_prompt(self):
        policy, out = _policy(allowlist=["read*"])
        assert policy.check(_call("read")) is Decision.ALLOW
        assert policy.check(_call("readdir")) is Decision.ALLOW
        assert out.getvalue() == ""

    def test_non_matching_name_prompts(self):
        policy, out = _policy(answers="n\n", allowlist=["read*"])
        assert policy.check(_call("write")) is Decision.DENY
        assert "Tool Call: write" in out.getvalue()


class TestPrompt:
    @pytest.mark.parametrize("answer, expected", [
        ("y\n", Decision.ALLOW),
        ("Yes please\n", Decision.ALLOW),
        ("n\n", Decision.DENY),
        ("  N\n", Decision.DENY),
        ("c\n", Decision.ABORT),
    ])
    def test_answers(self, answer, expected):
        policy, _ = _policy(answers=answer)
        assert policy.check(_call()) is expected

    def test_always_remembers_tool_for_session(self):
        policy, out = _policy(answers="a\n")
        assert policy.check(_call("shell")) is Decision.ALLOW
        prompts_before = out.getvalue().count(PROMPT)
        assert policy.check(_call("shell")) is Decision.ALLOW
        assert out.getvalue().count(PROMPT) == prompts_before
        assert "shell" in policy.always_allowed

    def test_always_is_per_tool(self):
        policy, _ = _policy(answers="a\nn\n")
        policy.check(_call("shell"))
        assert policy.check(_call("write")) is Decision.DENY

    def test_invalid_answer_reprompts(self):
        policy, out = _policy(answers="maybe\n\ny\n")
        assert policy.check(_call()) is Decision.ALLOW
        text = out.getvalue()
        assert text.count("Invalid response. Please enter Y, N, A, or C.") == 2
        assert text.count(PROMPT) == 3

    def test_end_of_input_aborts(self):
        policy, out = _policy(answers="")
        assert policy.check(_call()) is Decision.ABORT
        assert "Operation cancelled." in out.getvalue()

    def test_prompt_shows_arguments(self):
        policy, out = _policy(answers="y\n")
        policy.check(_call())
        assert '"command": "ls"' in out.getvalue()
