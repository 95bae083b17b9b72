from __future__ import annotations

import threading
import time
from typing import Callable, List, Tuple

import pytest

from filetail.ingestion.listener import TailerListener
from filetail.ingestion.tailer import Tailer


class RecordingListener(TailerListener):
    """Collects every event; written by the tailer thread, read by the test."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.events: List[Tuple[str, object]] = []
        self.tailer = None
        self.initialized = 0

    def _add(self, kind: str, value: object = None) -> None:
        with self._lock:
            self.events.append((kind, value))

    def _of(self, kind: str) -> list:
        with self._lock:
            return [v for k, v in self.events if k == kind]

    @property
    def lines(self) -> List[str]:
        return self._of("line")

    @property
    def exceptions(self) -> List[BaseException]:
        return self._of("error")

    @property
    def not_found(self) -> int:
        return len(self._of("not_found"))

    @property
    def rotated(self) -> int:
        return len(self._of("rotated"))

    @property
    def eof(self) -> int:
        return len(self._of("eof"))

    def kinds(self) -> List[str]:
        with self._lock:
            return [k for k, _ in self.events]

    def clear(self) -> None:
        with self._lock:
            self.events.clear()

    def init(self, tailer) -> None:
        self.tailer = tailer
        self.initialized += 1

    def file_not_found(self) -> None:
        self._add("not_found")

    def file_rotated(self) -> None:
        self._add("rotated")

    def handle(self, line: str) -> None:
        self._add("line", line)

    def handle_exception(self, exc: BaseException) -> None:
        self._add("error", exc)

    def end_of_file_reached(self) -> None:
        self._add("eof")


def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def wait_for():
    return _wait_for


@pytest.fixture
def make_tailer(listener):
    created: List[Tailer] = []

    def _make(path, **options) -> Tailer:
        target = options.pop("listener", listener)
        options.setdefault("delay", 0.02)
        options.setdefault("end", False)
        tailer = Tailer.create(path, target, **options)
        created.append(tailer)
        return tailer

    yield _make
    for tailer in created:
        tailer.stop(timeout=2.0)
