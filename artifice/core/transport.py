"""
Streaming HTTP transport for the chat-completions endpoint.
Feeds the response body to the SSE line splitter as bytes arrive and supports
cooperative cancellation from a SIGINT handler.
"""
from __future__ import annotations

import logging
import signal
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional

import httpx

from .sse import LineSplitter

DEFAULT_TIMEOUT = httpx.Timeout(300.0, connect=30.0)


class CancelToken:
    """Process-wide cancellation flag, safe to set from a signal handler."""

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        self._event.set()

    def reset(self):
        self._event.clear()

    def _on_sigint(self, signum, frame):
        self._event.set()
        # Unblocks any pending socket read or select in the main thread.
        signal.default_int_handler(signum, frame)

    @contextmanager
    def sigint_handler(self) -> Iterator["CancelToken"]:
        previous = signal.signal(signal.SIGINT, self._on_sigint)
        try:
            yield self
        finally:
            signal.signal(signal.SIGINT, previous)


class StreamStatus(str, Enum):
    OK = "ok"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass
class StreamResult:
    status: StreamStatus
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is StreamStatus.OK

    @property
    def cancelled(self) -> bool:
        return self.status is StreamStatus.CANCELLED


class StreamingTransport:
    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        cancel_token: Optional[CancelToken] = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.cancel_token = cancel_token or CancelToken()
        self.client = httpx.Client(timeout=timeout, transport=transport)
        self.logger = logging.getLogger(__name__)

    @property
    def url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def stream(self, body: Dict[str, Any], on_event: Callable[[bytes], None]) -> StreamResult:
        """POST `body` and feed each `data:` payload to `on_event` in arrival order."""
        if self.cancel_token.cancelled:
            return StreamResult(StreamStatus.CANCELLED)

        splitter = LineSplitter(on_event)
        self.logger.info("POST %s model=%s messages=%d", self.url, body.get("model"), len(body.get("messages", [])))
        try:
            with self.client.stream("POST", self.url, json=body, headers=self._headers()) as response:
                if response.status_code >= 400:
                    text = response.read().decode("utf-8", errors="replace").strip()
                    self.logger.warning("HTTP %s from %s", response.status_code, self.url)
                    message = f"HTTP {response.status_code}: {text}" if text else f"HTTP {response.status_code}"
                    return StreamResult(StreamStatus.ERROR, message, response.status_code)
                for chunk in response.iter_bytes():
                    if self.cancel_token.cancelled:
                        self.logger.info("Stream cancelled")
                        return StreamResult(StreamStatus.CANCELLED, status_code=response.status_code)
                    splitter.feed(chunk)
                status_code = response.status_code
        except KeyboardInterrupt:
            self.cancel_token.cancel()
            self.logger.info("Stream interrupted")
            return StreamResult(StreamStatus.CANCELLED)
        except httpx.HTTPError as exc:
            if self.cancel_token.cancelled:
                return StreamResult(StreamStatus.CANCELLED)
            self.logger.warning("Request failed: %s", exc)
            return StreamResult(StreamStatus.ERROR, f"HTTP request failed: {exc}")

        if self.cancel_token.cancelled:
            return StreamResult(StreamStatus.CANCELLED, status_code=status_code)
        self.logger.debug("Stream complete: %d event(s)", splitter.dispatched)
        return StreamResult(StreamStatus.OK, status_code=status_code)

    def close(self):
        self.client.close()

    def __enter__(self) -> "StreamingTransport":
        return self

    def __exit__(self, *exc):
        self.close()
