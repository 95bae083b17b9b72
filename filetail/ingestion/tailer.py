"""
Polling file tailer.

Follows a growing text file like ``tail -f`` and hands every complete line
to a listener. Handles truncation, replacement by a new file (delete or
rename followed by recreate), temporary absence of the file, and multi-byte
characters split across reads.

Typical use::

    tailer = Tailer.create("/var/log/app.log", MyListener(), delay=0.5)
    ...
    tailer.stop(timeout=2.0)

The polling loop runs on exactly one thread, either the one started by
``create``/``start`` or any executor that calls ``run``. Only ``stop`` and
``interrupt`` are meant to be called from other threads.
"""

from __future__ import annotations

import codecs
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, List, Optional, Tuple, Union

from ..utils.config import TailerConfig
from ..utils.logger import logger
from .errors import TailerGaveUp, TailerInterrupted
from .lines import LineSplitter
from .listener import TailerListener
from .source import FileSource, FileState
from .watch import stop_watching, watch_file


@dataclass
class _RunState:
    """Mutable state of one run; only touched by the polling thread."""

    charset: str
    position: int = 0
    last_size: int = 0
    last_modified: int = 0
    identity: Optional[Tuple[int, int]] = None
    handle: Optional[BinaryIO] = None
    missing: bool = False
    splitter: LineSplitter = field(default_factory=LineSplitter)
    decoder: codecs.IncrementalDecoder = field(init=False)

    def __post_init__(self) -> None:
        self.decoder = codecs.getincrementaldecoder(self.charset)(errors="replace")

    def decode(self, chunk: bytes) -> List[str]:
        return self.splitter.feed(self.decoder.decode(chunk))

    def reset_carry(self) -> None:
        self.decoder.reset()
        self.splitter.reset()

    def close(self) -> None:
        handle, self.handle = self.handle, None
        if handle is not None:
            handle.close()


class _ListenerFailed(Exception):
    """Wraps an exception raised by a listener callback so it is not retried."""

    def __init__(self, error: Exception) -> None:
        super().__init__(error)
        self.error = error


class Tailer:
    """Watches a file and delivers newly appended lines to a listener."""

    def __init__(self, config: TailerConfig, listener: TailerListener, source: Optional[FileSource] = None) -> None:
        if config is None:
            raise ValueError("config must not be None")
        if listener is None:
            raise ValueError("listener must not be None")
        self._config = config
        self._listener = listener
        self._source = source or FileSource(config.path)
        self._stop = threading.Event()
        self._interrupt = threading.Event()
        self._wakeup = threading.Event()
        self._started = threading.Event()
        self._finished = threading.Event()
        self._lock = threading.Lock()
        self._runner_ident: Optional[int] = None
        listener.init(self)

    @classmethod
    def create(
        cls,
        path: Union[str, Path],
        listener: TailerListener,
        *,
        start: bool = True,
        daemon: bool = True,
        source: Optional[FileSource] = None,
        **options: Any,
    ) -> "Tailer":
        """Build a tailer for ``path`` and, by default, start it on a daemon thread.

        ``options`` are TailerConfig fields (delay, charset, end, reopen,
        buffer_size, max_consecutive_errors, watch). Invalid values raise
        immediately.
        """
        config = TailerConfig(path=Path(path), **options)
        return cls.from_config(config, listener, start=start, daemon=daemon, source=source)

    @classmethod
    def from_config(
        cls,
        config: TailerConfig,
        listener: TailerListener,
        *,
        start: bool = True,
        daemon: bool = True,
        source: Optional[FileSource] = None,
    ) -> "Tailer":
        tailer = cls(config, listener, source=source)
        if start:
            tailer.start(daemon=daemon)
        return tailer

    @property
    def path(self) -> Path:
        return self._config.path

    @property
    def config(self) -> TailerConfig:
        return self._config

    @property
    def delay(self) -> float:
        return self._config.delay

    @property
    def is_running(self) -> bool:
        return self._started.is_set() and not self._finished.is_set()

    def start(self, daemon: bool = True) -> threading.Thread:
        thread = threading.Thread(target=self.run, name=f"tailer-{self.path.name}", daemon=daemon)
        thread.start()
        return thread

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Ask the loop to end after its current step.

        With a timeout, wait up to that many seconds for the loop to exit.
        Returns True if the loop is no longer running.
        """
        self._stop.set()
        self._wakeup.set()
        if not self._started.is_set():
            return True
        if timeout is None or self._runner_ident == threading.get_ident():
            return self._finished.is_set()
        return self._finished.wait(timeout)

    def interrupt(self) -> None:
        """Interrupt the poll sleep; the loop reports TailerInterrupted and exits."""
        self._interrupt.set()
        self._wakeup.set()

    def __enter__(self) -> "Tailer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop(timeout=self._config.delay + 1.0)

    def __repr__(self) -> str:
        return f"Tailer({str(self.path)!r}, delay={self._config.delay})"

    def run(self) -> None:
        """Poll until stopped. Never raises; failures go to the listener."""
        with self._lock:
            if self._started.is_set():
                logger.warning("Tailer for {} already started; ignoring run()", self.path)
                return
            self._started.set()
        self._runner_ident = threading.get_ident()
        state = _RunState(self._config.charset)
        observer = None
        try:
            if not self._stop.is_set() and self._config.watch:
                try:
                    observer = watch_file(str(self.path), self._wakeup.set)
                except OSError as exc:
                    # notifications are optional; keep polling
                    logger.warning("Cannot watch {}: {}", self.path, exc)
            logger.debug("Tailing {} every {}s", self.path, self._config.delay)
            self._loop(state)
        except TailerInterrupted as exc:
            logger.info("Tailer for {} interrupted", self.path)
            self._report(exc)
        except _ListenerFailed as exc:
            logger.warning("Listener of {} failed: {!r}", self.path, exc.error)
            self._report(exc.error)
        except Exception as exc:
            logger.warning("Tailer for {} failed: {!r}", self.path, exc)
            self._report(exc)
        finally:
            try:
                state.close()
            except OSError as exc:
                self._report(exc)
            stop_watching(observer)
            self._stop.set()
            self._finished.set()
            logger.debug("Stopped tailing {}", self.path)

    def _loop(self, state: _RunState) -> None:
        failures = 0
        while not self._stop.is_set():
            try:
                self._poll(state)
            except TailerInterrupted:
                raise
            except OSError as exc:
                failures += 1
                logger.warning(
                    "Polling {} failed ({}/{}): {}", self.path, failures, self._config.max_consecutive_errors, exc
                )
                state.close()
                self._report(exc)
                if failures >= self._config.max_consecutive_errors:
                    gave_up = TailerGaveUp(failures)
                    gave_up.__cause__ = exc
                    self._report(gave_up)
                    return
            else:
                failures = 0
            if self._stop.is_set():
                return
            self._pause()

    def _poll(self, state: _RunState) -> None:
        current = self._source.stat()
        if current is None:
            self._file_missing(state)
            return

        try:
            if state.identity is None:
                self._open(state, current, at_end=self._config.end)
            elif state.missing or current.identity != state.identity or current.size < state.position:
                self._rotate(state, current)
            elif state.handle is None:
                state.handle = self._source.open()
        except FileNotFoundError:
            # Removed between stat() and open().
            self._file_missing(state)
            return
        state.missing = False

        if current.size > state.position or current.modified_ns > state.last_modified:
            self._read(state, state.handle, current.size)
            state.last_modified = current.modified_ns
            if self._stop.is_set():
                return
            self._notify("end_of_file_reached")
        state.last_size = current.size

        if self._config.reopen:
            state.close()

    def _open(self, state: _RunState, current: FileState, at_end: bool) -> None:
        handle = self._source.open()
        state.handle = handle
        state.identity = self._source.identity_of(handle)
        state.position = handle.seek(0, os.SEEK_END) if at_end else 0
        state.last_size = current.size
        state.last_modified = current.modified_ns
        state.reset_carry()
        logger.debug("Opened {} at byte {}", self.path, state.position)

    def _rotate(self, state: _RunState, current: FileState) -> None:
        if state.handle is not None:
            self._drain(state, state.handle)
            state.close()
        # announced only once the new file is open; a failed open is retried next cycle
        self._open(state, current, at_end=False)
        logger.info("{} was rotated", self.path)
        self._notify("file_rotated")

    def _drain(self, state: _RunState, handle: BinaryIO) -> None:
        """Deliver complete lines still readable from the old handle."""
        try:
            end = handle.seek(0, os.SEEK_END)
            if end > state.position:
                self._read(state, handle, end)
        except OSError as exc:
            self._report(exc)

    def _file_missing(self, state: _RunState) -> None:
        if state.handle is not None:
            self._drain(state, state.handle)
            state.close()
        if not state.missing:
            state.missing = True
            logger.info("{} not found", self.path)
            self._notify("file_not_found")

    def _notify(self, hook: str, *args: Any) -> None:
        try:
            getattr(self._listener, hook)(*args)
        except Exception as exc:
            raise _ListenerFailed(exc) from exc

    def _read(self, state: _RunState, handle: BinaryIO, limit: int) -> None:
        handle.seek(state.position)
        bufsize = self._config.buffer_size
        while state.position < limit and not self._stop.is_set():
            chunk = handle.read(min(bufsize, limit - state.position))
            if not chunk:
                break
            state.position += len(chunk)
            for line in state.decode(chunk):
                if self._stop.is_set():
                    return
                self._notify("handle", line)

    def _pause(self) -> None:
        if not self._interrupt.is_set():
            self._wakeup.wait(self._config.delay)
        self._wakeup.clear()
        if self._interrupt.is_set():
            raise TailerInterrupted(f"sleep between polls of {self.path} was interrupted")

    def _report(self, exc: BaseException) -> None:
        try:
            self._listener.handle_exception(exc)
        except Exception:
            logger.exception("Listener failed to handle {!r}; stopping tailer for {}", exc, self.path)
            self._stop.set()


__all__ = ["Tailer"]
