"""
Breathing-dot progress indicator drawn on stderr by a background thread.

One worker thread lives for a whole invocation. An `enabled` flag guarded by a
condition variable decides whether frames are drawn. Every stdout write goes
through `write_chunk`, which holds the same lock, so a frame is never
interleaved with model text. The cursor position is tracked with ANSI
save/restore, so the dot always sits where the next character will appear.
"""
from __future__ import annotations

import sys
import threading
import time
from typing import Optional, TextIO

from .colors import Colors

# Inhale is faster than exhale, and the rest frames make the pause between
# breaths. At 120 ms per tick one cycle takes about 1.7 s.
FRAMES = (
    "\033[2;36m·\033[0m",
    "\033[2;36m·\033[0m",
    "\033[2;36m·\033[0m",
    "\033[2;36m·\033[0m",
    "\033[2;36m·\033[0m",
    "\033[36m·\033[0m",
    "\033[36m•\033[0m",
    "\033[1;36m●\033[0m",
    "\033[1;36m•\033[0m",
    "\033[1;36m•\033[0m",
    "\033[36m•\033[0m",
    "\033[36m·\033[0m",
    "\033[2;36m·\033[0m",
    "\033[2;36m·\033[0m",
)

TICK_INTERVAL = 0.12
HEARTBEAT_AFTER = 1.0


class ProgressIndicator:
    """Background spinner synchronized with stdout writes.

    With `heartbeat` set, a chunk written during a turn hides the dot until
    that many seconds pass without further output; with `heartbeat=None` the
    dot reappears right after each chunk.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        out: Optional[TextIO] = None,
        interval: float = TICK_INTERVAL,
        heartbeat: Optional[float] = HEARTBEAT_AFTER,
    ):
        self.stream = stream or sys.stderr
        self.out = out or sys.stdout
        self.interval = interval
        self.heartbeat = heartbeat
        self._cond = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._active = False
        self._enabled = False
        self._turn_open = False
        self._last_write: Optional[float] = None
        self._cursor_hidden = False
        self.frames_drawn = 0

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def enabled(self) -> bool:
        with self._cond:
            return self._enabled

    def start(self):
        if self._thread is not None:
            return
        self._active = True
        self._enabled = False
        self._thread = threading.Thread(target=self._run, name="progress-indicator", daemon=True)
        self._thread.start()

    def stop(self):
        if self._thread is None:
            return
        with self._cond:
            self._active = False
            self._cond.notify()
        self._thread.join()
        self._thread = None

    def turn_start(self):
        """Save the cursor and start drawing; call just before a model request."""
        if self._thread is None:
            return
        with self._cond:
            self._save_cursor()
            self._turn_open = True
            self._last_write = None
            self._enabled = True
            self._cond.notify()

    def turn_end(self):
        """Stop drawing and clear the frame; call right after a model request."""
        if self._thread is None:
            return
        with self._cond:
            self._turn_open = False
            if self._enabled:
                self._clear_frame()
                self._enabled = False
            self._show_cursor()

    def write_chunk(self, text: str):
        if self._thread is None:
            self.out.write(text)
            self.out.flush()
            return

        with self._cond:
            if self._enabled:
                self._clear_frame()
                self._enabled = False
            self.out.write(text)
            self.out.flush()
            if self._turn_open:
                self._last_write = time.monotonic()
                self._save_cursor()
                if self.heartbeat is None:
                    self._enabled = True
                    self._cond.notify()

    def _run(self):
        frame = 0
        with self._cond:
            while self._active:
                if (
                    not self._enabled
                    and self._turn_open
                    and self.heartbeat is not None
                    and self._last_write is not None
                    and time.monotonic() - self._last_write >= self.heartbeat
                ):
                    self._enabled = True
                if self._enabled:
                    if not self._cursor_hidden:
                        self.stream.write(Colors.HIDE_CURSOR)
                        self._cursor_hidden = True
                    self.stream.write(f"{Colors.RESTORE_CURSOR}{FRAMES[frame % len(FRAMES)]}{Colors.RESTORE_CURSOR}")
                    self.stream.flush()
                    frame += 1
                    self.frames_drawn += 1
                self._cond.wait(self.interval)
            if self._enabled:
                self._clear_frame()
                self._enabled = False
            self._show_cursor()

    def _save_cursor(self):
        self.stream.write(Colors.SAVE_CURSOR)
        self.stream.flush()

    def _clear_frame(self):
        self.stream.write(f"{Colors.RESTORE_CURSOR} {Colors.RESTORE_CURSOR}")
        self._show_cursor()

    def _show_cursor(self):
        # The cursor is hidden only while frames are being drawn.
        if self._cursor_hidden:
            self.stream.write(Colors.SHOW_CURSOR)
            self._cursor_hidden = False
        self.stream.flush()

    def __enter__(self) -> "ProgressIndicator":
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
