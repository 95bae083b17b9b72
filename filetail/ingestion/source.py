from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Tuple


@dataclass(frozen=True)
class FileState:
    """Snapshot of the tailed file's metadata."""

    size: int
    modified_ns: int
    # (st_dev, st_ino); changes when the path is replaced by a new file
    identity: Tuple[int, int]


def _identity(st: os.stat_result) -> Tuple[int, int]:
    return (st.st_dev, st.st_ino)


class FileSource:
    """Random-access byte resource backing a tailer.

    All filesystem access of the tailer goes through this class, so a
    different resource (or a failing one, in tests) can be substituted.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def stat(self) -> Optional[FileState]:
        """Return the current state, or None if the file does not exist."""
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        return FileState(size=st.st_size, modified_ns=st.st_mtime_ns, identity=_identity(st))

    def open(self) -> BinaryIO:
        return open(self.path, "rb")

    def identity_of(self, handle: BinaryIO) -> Tuple[int, int]:
        return _identity(os.fstat(handle.fileno()))

    def __repr__(self) -> str:
        return f"FileSource({str(self.path)!r})"


__all__ = ["FileSource", "FileState"]
