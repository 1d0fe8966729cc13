"""Optional side-channel for dumping intermediate artifacts while debugging."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

from .config import Settings
from .logging import get_logger

logger = get_logger("debug")

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


class DebugSink(Protocol):
    def write(self, name: str, content: str, *, extension: str = "md") -> None: ...


class NullDebugSink:
    """Discards everything; used when debugging is disabled."""

    def write(self, name: str, content: str, *, extension: str = "md") -> None:
        return None


class DirectoryDebugSink:
    """Writes each artifact to ``<directory>/<name>.<extension>``."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def write(self, name: str, content: str, *, extension: str = "md") -> None:
        filename = f"{_UNSAFE_NAME.sub('_', name)}.{extension}"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            (self.directory / filename).write_text(content, encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to write debug artifact %s: %s", filename, exc)


def debug_sink_for(settings: Settings) -> DebugSink:
    if settings.debug:
        return DirectoryDebugSink(settings.debug_dir)
    return NullDebugSink()


__all__ = ["DebugSink", "DirectoryDebugSink", "NullDebugSink", "debug_sink_for"]
