from __future__ import annotations


class TailerError(Exception):
    """Base class for failures reported by the tailer to its listener."""


class TailerInterrupted(TailerError, InterruptedError):
    """Raised when the sleep between polls is interrupted."""


class TailerGaveUp(TailerError):
    """Raised when polling keeps failing and the tailer stops retrying."""

    def __init__(self, failures: int) -> None:
        super().__init__(f"giving up after {failures} consecutive failed polls")
        self.failures = failures


__all__ = ["TailerError", "TailerInterrupted", "TailerGaveUp"]
