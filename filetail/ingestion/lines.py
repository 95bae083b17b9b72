"""
Incremental line splitting for tailed text.

Text arrives in arbitrary chunks; complete lines are returned as soon as
their terminator is seen and everything after the last terminator is kept
as carry-over for the next chunk.

Terminators: ``\\n``, ``\\r\\n`` and a lone ``\\r`` followed by any other
character. A ``\\r`` at the very end of a chunk is held back because the
next chunk may start with ``\\n``. A ``\\r`` that directly follows a held
``\\r`` is kept as line content.
"""

from __future__ import annotations

import re
from typing import List


_TERMINATOR = re.compile(r"[\r\n]")


class LineSplitter:
    """Stateful splitter holding a partial line between ``feed`` calls."""

    def __init__(self) -> None:
        self._parts: List[str] = []
        self._seen_cr = False

    @property
    def pending(self) -> str:
        """Unterminated text held back, including a held ``\\r``."""
        return "".join(self._parts) + ("\r" if self._seen_cr else "")

    def reset(self) -> None:
        self._parts = []
        self._seen_cr = False

    def feed(self, text: str) -> List[str]:
        """Consume ``text`` and return the lines it completes."""
        lines: List[str] = []
        pos = 0
        for m in _TERMINATOR.finditer(text):
            start = m.start()
            if start > pos:
                self._content(text[pos:start], lines)
            if m.group() == "\n":
                self._seen_cr = False
                self._emit(lines)
            else:
                if self._seen_cr:
                    self._parts.append("\r")
                self._seen_cr = True
            pos = m.end()
        if pos < len(text):
            self._content(text[pos:], lines)
        return lines

    def _content(self, chunk: str, lines: List[str]) -> None:
        if self._seen_cr:
            self._seen_cr = False
            self._emit(lines)
        self._parts.append(chunk)

    def _emit(self, lines: List[str]) -> None:
        lines.append("".join(self._parts))
        self._parts = []


__all__ = ["LineSplitter"]
