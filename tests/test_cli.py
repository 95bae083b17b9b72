from __future__ import annotations

import sys
from pathlib import Path

import pytest

from filetail.cli import main
from filetail.utils.logger import logger


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("FILETAIL_CONFIG_PATH", str(tmp_path / "absent.yaml"))
    yield
    # main() points loguru at the captured stderr of the test
    logger.remove()
    logger.add(sys.stderr)


def test_cli_prints_lines_and_stops(tmp_path: Path, capsys):
    log = tmp_path / "app.log"
    log.write_text("one\ntwo\nthree\n")

    code = main(["--from-start", "--delay", "0.01", "--max-lines", "2", str(log)])

    assert code == 0
    assert capsys.readouterr().out == "one\ntwo\n"


def test_cli_reads_config_file(tmp_path: Path, capsys):
    log = tmp_path / "app.log"
    log.write_bytes("caf\xe9\n".encode("latin-1"))
    cfg = tmp_path / "config.yaml"
    cfg.write_text("tailer:\n  delay: 0.01\n  charset: latin-1\n  end: false\n")

    code = main(["--config", str(cfg), "--max-lines", "1", str(log)])

    assert code == 0
    assert capsys.readouterr().out == "café\n"


def test_cli_rejects_bad_delay(tmp_path: Path, capsys):
    code = main(["--delay", "0", str(tmp_path / "app.log")])
    assert code == 2
    assert "invalid configuration" in capsys.readouterr().err


def test_cli_uses_config_from_environment(tmp_path: Path, capsys, monkeypatch):
    log = tmp_path / "app.log"
    log.write_bytes("na\xefve\n".encode("latin-1"))
    cfg = tmp_path / "env.yaml"
    cfg.write_text("tailer:\n  delay: 0.01\n  charset: latin-1\n  end: false\n")
    monkeypatch.setenv("FILETAIL_CONFIG_PATH", str(cfg))

    code = main(["--max-lines", "1", str(log)])

    assert code == 0
    assert capsys.readouterr().out == "naïve\n"


def test_cli_missing_explicit_config(tmp_path: Path, capsys):
    code = main(["--config", str(tmp_path / "nope.yaml"), str(tmp_path / "app.log")])
    assert code == 2
