"""
Command line ``tail -f`` built on the polling tailer.

Usage examples:
  # Follow a log from its current end
  filetail /var/log/app.log

  # Print the whole file, then keep following, reading settings from YAML
  filetail --config config.yaml --from-start /var/log/app.log

  # Stop after ten lines
  filetail --from-start --max-lines 10 /var/log/app.log
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from .ingestion.listener import TailerListener
from .ingestion.tailer import Tailer
from .utils.config import TailerConfig, config_path, load_config, tailer_config_from_mapping
from .utils.logger import logger, setup_logging


class PrintingListener(TailerListener):
    """Writes lines to stdout and notices to stderr."""

    def __init__(self, max_lines: Optional[int] = None, out=None, err=None) -> None:
        self.max_lines = max_lines
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.count = 0
        self.tailer: Optional[Tailer] = None
        self.error: Optional[BaseException] = None

    def init(self, tailer: Tailer) -> None:
        self.tailer = tailer

    def file_not_found(self) -> None:
        self.err.write(f"filetail: {self.tailer.path if self.tailer else 'file'}: not found, waiting\n")

    def file_rotated(self) -> None:
        self.err.write("filetail: file rotated, following new content\n")

    def handle(self, line: str) -> None:
        self.out.write(line + "\n")
        self.out.flush()
        self.count += 1
        if self.max_lines is not None and self.count >= self.max_lines and self.tailer is not None:
            self.tailer.stop()

    def handle_exception(self, exc: BaseException) -> None:
        self.error = exc
        self.err.write(f"filetail: {exc}\n")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="filetail", description="Follow a growing text file")
    ap.add_argument("file", help="File to follow; it does not have to exist yet")
    ap.add_argument(
        "--config", default=None, help="YAML file with a 'tailer' section (default: $FILETAIL_CONFIG_PATH or config.yaml)"
    )
    ap.add_argument("--from-start", action="store_true", help="Read the file from the beginning")
    ap.add_argument("--delay", type=float, default=None, help="Seconds between polls")
    ap.add_argument("--charset", default=None)
    ap.add_argument("--buffer-size", type=int, default=None)
    ap.add_argument("--reopen", action="store_true", default=None, help="Reopen the file on every poll")
    ap.add_argument("--watch", action="store_true", default=None, help="Wake up on filesystem events")
    ap.add_argument("--max-lines", type=int, default=None, help="Stop after this many lines")
    ap.add_argument("--log-dir", default=None, help="Directory for the filetail.log debug log")
    return ap


def _build_config(args: argparse.Namespace) -> TailerConfig:
    if args.config:
        mapping = load_config(args.config)
    else:
        default = config_path()
        mapping = load_config(default) if os.path.isfile(default) else {}
    return tailer_config_from_mapping(
        mapping,
        path=args.file,
        end=False if args.from_start else None,
        delay=args.delay,
        charset=args.charset,
        buffer_size=args.buffer_size,
        reopen=args.reopen,
        watch=args.watch,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_dir, level="DEBUG")
    try:
        config = _build_config(args)
    except (OSError, ValidationError) as exc:
        print(f"filetail: invalid configuration: {exc}", file=sys.stderr)
        return 2

    listener = PrintingListener(max_lines=args.max_lines)
    tailer = Tailer.from_config(config, listener, start=False)
    logger.info("Following {}", config.path)
    try:
        tailer.run()
    except KeyboardInterrupt:
        tailer.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
