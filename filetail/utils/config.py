from __future__ import annotations

import codecs
import locale
import os
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _default_charset() -> str:
    return locale.getpreferredencoding(False)


def _default_reopen() -> bool:
    # Windows cannot delete a file that is held open, so always reopen there.
    return sys.platform.startswith("win")


class TailerConfig(BaseModel):
    """Immutable tailer settings, validated on construction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path
    delay: float = Field(1.0, gt=0, description="Seconds between polls")
    charset: str = Field(default_factory=_default_charset)
    end: bool = Field(True, description="Start at the current end of the file")
    reopen: bool = Field(default_factory=_default_reopen, description="Close and reopen the file between polls")
    buffer_size: int = Field(8192, gt=0)
    max_consecutive_errors: int = Field(10, ge=1)
    watch: bool = Field(False, description="Wake up early on filesystem events")

    @field_validator("charset")
    @classmethod
    def _known_charset(cls, value: str) -> str:
        try:
            info = codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown charset: {value}") from exc
        # bytes-to-bytes and str-to-str codecs (base64, rot13, zlib) cannot decode text
        if not info._is_text_encoding:
            raise ValueError(f"not a text encoding: {value}")
        return value


def load_config(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def config_path() -> str:
    """Default YAML config location; FILETAIL_CONFIG_PATH overrides it."""
    return os.environ.get("FILETAIL_CONFIG_PATH", os.path.join(os.path.dirname(os.path.dirname(__file__)), "..", "config.yaml"))


def tailer_config_from_mapping(mapping: Optional[Mapping[str, Any]], **overrides: Any) -> TailerConfig:
    """Build a TailerConfig from the ``tailer`` section of a loaded document.

    Overrides that are None are ignored so argparse defaults do not mask
    values from the file.
    """
    section: Dict[str, Any] = dict((mapping or {}).get("tailer") or {})
    section.update({k: v for k, v in overrides.items() if v is not None})
    return TailerConfig(**section)


def load_tailer_config(path: str, **overrides: Any) -> TailerConfig:
    return tailer_config_from_mapping(load_config(path), **overrides)


__all__ = [
    "TailerConfig",
    "load_config",
    "config_path",
    "tailer_config_from_mapping",
    "load_tailer_config",
]
