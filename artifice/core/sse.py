"""
Incremental Server-Sent-Events line splitter.
Buffers raw network bytes into lines and dispatches `data: ` payloads.
"""
from __future__ import annotations

import re
from typing import Callable

DATA_PREFIX = b"data: "
DONE_SENTINEL = b"[DONE]"

_TERMINATOR = re.compile(rb"[\r\n]")


class LineSplitter:
    """Split an arbitrarily chunked byte stream into SSE event payloads.

    Both CR and LF end a line, so CRLF produces an extra empty line which is
    dropped like any other line without the `data: ` prefix. Not thread-safe:
    feed from a single thread only.
    """

    def __init__(self, on_event: Callable[[bytes], None]):
        self.on_event = on_event
        self._line = bytearray()
        self.dispatched = 0

    def feed(self, data: bytes) -> int:
        pos = 0
        for match in _TERMINATOR.finditer(data):
            self._line += data[pos:match.start()]
            self._finish_line()
            pos = match.end()
        self._line += data[pos:]
        return len(data)

    @property
    def pending(self) -> bytes:
        """The unterminated tail of the stream seen so far."""
        return bytes(self._line)

    def _finish_line(self):
        line = bytes(self._line)
        self._line.clear()
        if not line.startswith(DATA_PREFIX):
            return
        payload = line[len(DATA_PREFIX):]
        if not payload or payload.strip() == DONE_SENTINEL:
            return
        self.dispatched += 1
        self.on_event(payload)
