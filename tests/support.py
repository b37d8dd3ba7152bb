"""Helpers for building SSE bodies and scripted chat-completions endpoints."""

import json

import httpx

from artifice.core.transport import StreamingTransport

BASE_URL = "https://api.example.test/v1/"


def sse_event(payload) -> bytes:
    if not isinstance(payload, str):
        payload = json.dumps(payload)
    return f"data: {payload}\n\n".encode()


def text_chunk(text: str) -> dict:
    return {"choices": [{"index": 0, "delta": {"content": text}}]}


def tool_chunk(index: int, id=None, name=None, arguments=None) -> dict:
    tc = {"index": index, "function": {}}
    if id is not None:
        tc["id"] = id
    if name is not None:
        tc["function"]["name"] = name
    if arguments is not None:
        tc["function"]["arguments"] = arguments
    return {"choices": [{"index": 0, "delta": {"tool_calls": [tc]}}]}


def usage_chunk(prompt_tokens: int, completion_tokens: int) -> dict:
    return {"choices": [], "usage": {"prompt_tokens": prompt_tokens, "completion_tokens": completion_tokens}}


def sse_body(*chunks, done: bool = True) -> bytes:
    body = b"".join(sse_event(c) for c in chunks)
    if done:
        body += b"data: [DONE]\n\n"
    return body


def tool_call_body(call_id: str, name: str, arguments: str) -> bytes:
    return sse_body(tool_chunk(0, id=call_id, name=name, arguments=arguments))


class ScriptedEndpoint:
    """Mock chat-completions endpoint replaying one response per request.

    A scripted entry is raw SSE bytes, a ready `httpx.Response`, or a callable
    taking the request and returning either.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.bodies = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.bodies.append(json.loads(request.content))
        if not self.responses:
            return httpx.Response(500, content=b"no scripted response left")
        response = self.responses.pop(0)
        if callable(response):
            response = response(request)
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, content=response, headers={"content-type": "text/event-stream"})

    def transport(self, api_key="sk-test", **kwargs) -> StreamingTransport:
        return StreamingTransport(BASE_URL, api_key=api_key, transport=httpx.MockTransport(self), **kwargs)
