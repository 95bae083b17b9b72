"""
Listener surface of the tailer.

A listener receives six kinds of events, always synchronously on the
polling thread. Implementations must return promptly; a blocking callback
stalls tailing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .tailer import Tailer


class TailerListener:
    """Base listener; every hook is a no-op, override the ones you need."""

    def init(self, tailer: "Tailer") -> None:
        """Called once when the tailer is constructed."""

    def file_not_found(self) -> None:
        """Called each time the tailed file is found to be missing."""

    def file_rotated(self) -> None:
        """Called when the file was truncated or replaced."""

    def handle(self, line: str) -> None:
        """Called for every complete line, without its terminator."""

    def handle_exception(self, exc: BaseException) -> None:
        """Called for failures while polling."""

    def end_of_file_reached(self) -> None:
        """Called after all currently available bytes were read."""


TailerListenerAdapter = TailerListener


class CallbackListener(TailerListener):
    """Dispatch tailer events to plain callables."""

    def __init__(
        self,
        on_line: Callable[[str], None],
        on_error: Optional[Callable[[BaseException], None]] = None,
        on_rotated: Optional[Callable[[], None]] = None,
        on_not_found: Optional[Callable[[], None]] = None,
        on_eof: Optional[Callable[[], None]] = None,
    ) -> None:
        self.on_line = on_line
        self.on_error = on_error
        self.on_rotated = on_rotated
        self.on_not_found = on_not_found
        self.on_eof = on_eof
        self.tailer: Optional["Tailer"] = None

    def init(self, tailer: "Tailer") -> None:
        self.tailer = tailer

    def file_not_found(self) -> None:
        if self.on_not_found is not None:
            self.on_not_found()

    def file_rotated(self) -> None:
        if self.on_rotated is not None:
            self.on_rotated()

    def handle(self, line: str) -> None:
        self.on_line(line)

    def handle_exception(self, exc: BaseException) -> None:
        if self.on_error is not None:
            self.on_error(exc)

    def end_of_file_reached(self) -> None:
        if self.on_eof is not None:
            self.on_eof()


__all__ = ["TailerListener", "TailerListenerAdapter", "CallbackListener"]
