from __future__ import annotations

from loguru import logger
import os
import sys


def setup_logging(log_dir: str | None = None, level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(os.path.join(log_dir, "filetail.log"), rotation="10 MB", retention=10, level=level)


__all__ = ["logger", "setup_logging"]
