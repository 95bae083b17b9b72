"""
Filesystem change notifications using watchdog.

Used to cut the tailer's poll sleep short when the tailed file changes.
Events are only a hint; the tailer still decides what happened by polling.
"""

from __future__ import annotations

import os
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..utils.logger import logger


class FileChangeHandler(FileSystemEventHandler):
    """Watchdog event handler that fires a callback for events on one file."""

    def __init__(self, path: str, callback: Callable[[], None]) -> None:
        self.path = os.path.abspath(path)
        self.callback = callback
        super().__init__()

    def _concerns(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path, getattr(event, "dest_path", "")]
        return any(p and os.path.abspath(os.fsdecode(p)) == self.path for p in paths)

    def on_any_event(self, event: FileSystemEvent) -> None:  # type: ignore[override]
        if event.event_type in ("created", "modified", "moved", "deleted") and self._concerns(event):
            self.callback()


def watch_file(path: str, callback: Callable[[], None]) -> Optional[Observer]:
    """Start a daemon observer calling ``callback`` when ``path`` changes.

    Returns None when the parent directory does not exist, since there is
    nothing to schedule the watch on.
    """
    watch_dir = os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(watch_dir):
        logger.warning("Not watching {}: directory {} does not exist", path, watch_dir)
        return None
    observer = Observer()
    observer.schedule(FileChangeHandler(path, callback), watch_dir, recursive=False)
    observer.daemon = True
    observer.start()
    return observer


def stop_watching(observer: Optional[Observer], timeout: float = 5.0) -> None:
    if observer is None:
        return
    observer.stop()
    observer.join(timeout=timeout)


__all__ = ["FileChangeHandler", "watch_file", "stop_watching"]
