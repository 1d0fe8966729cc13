"""Repository walking and file collection utilities."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

import pathspec

from .debug import DebugSink, NullDebugSink
from .logging import get_logger
from .models import FileEntry
from .tree import render_tree

logger = get_logger("repo_scanner")

_ALWAYS_IGNORED = (".git",)

# Only consulted when content sniffing fails.
_BINARY_EXTENSIONS = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".ico", ".pdf", ".zip", ".jar", ".class", ".exe", ".bin"}
)

_SNIFF_BYTES = 8192
_TEXT_CHARACTERS = bytes({7, 8, 9, 10, 12, 13, 27} | set(range(0x20, 0x100)) - {0x7F})
_NON_TEXT_THRESHOLD = 0.30


class IgnoreMatcher:
    """Predicate over repository-relative paths built from ``.gitignore`` rules."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        lines = list(patterns)
        lines.extend(_ALWAYS_IGNORED)
        self._spec = pathspec.GitIgnoreSpec.from_lines(lines)

    @classmethod
    def build(cls, root: Path) -> "IgnoreMatcher":
        """Load the root ``.gitignore``; a missing file yields an empty rule set."""
        gitignore = root / ".gitignore"
        patterns: List[str] = []
        if gitignore.is_file():
            patterns = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
        return cls(patterns)

    def __call__(self, rel_path: str, is_dir: bool = False) -> bool:
        return self.ignores(rel_path, is_dir=is_dir)

    def ignores(self, rel_path: str, *, is_dir: bool = False) -> bool:
        """Return True when the path is ignored; evaluation errors fail open."""
        candidate = rel_path.replace(os.sep, "/")
        if is_dir and not candidate.endswith("/"):
            candidate = f"{candidate}/"
        try:
            return self._spec.match_file(candidate)
        except Exception as exc:
            logger.warning("Error checking ignore rules for %s: %s", rel_path, exc)
            return False


def is_text_file(path: Path) -> bool:
    """Sniff file content for binary signatures, falling back to an extension denylist."""
    try:
        with path.open("rb") as handle:
            chunk = handle.read(_SNIFF_BYTES)
    except OSError as exc:
        logger.warning("Failed to check if file is binary: %s (%s)", path, exc)
        return path.suffix.lower() not in _BINARY_EXTENSIONS
    return not _looks_binary(chunk)


def _looks_binary(chunk: bytes) -> bool:
    if not chunk:
        return False
    if b"\x00" in chunk:
        return True
    try:
        chunk.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut off by the sniff window is still text.
        if exc.start < len(chunk) - 3:
            non_text = len(chunk.translate(None, _TEXT_CHARACTERS))
            return non_text / len(chunk) > _NON_TEXT_THRESHOLD
    return False


def walk_files(root: Path, matcher: Callable[..., bool]) -> List[Path]:
    """Return every non-ignored file below ``root`` as a sorted list of absolute paths."""
    results: List[Path] = []
    # Symlinked directories are not descended into.
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in dirnames:
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if matcher(rel_path, True):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in filenames:
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if matcher(rel_path, False):
                continue
            results.append(current_dir / filename)
    return sorted(results)


def _raise_walk_error(error: OSError) -> None:
    raise error


class RepoCollector:
    """Collects text sources and the directory layout of a repository."""

    def __init__(self, debug_sink: DebugSink | None = None) -> None:
        self._debug = debug_sink or NullDebugSink()

    def collect_files(self, root: str | Path, include_tests: bool = False) -> List[FileEntry]:
        """Return text files under ``root`` in sorted path order.

        When ``include_tests`` is false any path containing ``test`` (case-insensitive)
        is dropped, whether the match is in a directory, filename or extension.
        """
        root_path = _resolve_root(root)
        matcher = IgnoreMatcher.build(root_path)
        entries: List[FileEntry] = []
        for path in walk_files(root_path, matcher):
            rel_path = path.relative_to(root_path).as_posix()
            if not include_tests and "test" in rel_path.lower():
                continue
            if not is_text_file(path):
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Failed to read file %s: %s", path, exc)
                continue
            entries.append(FileEntry(path=rel_path, content=content))

        logger.debug("Collected %d text files from %s", len(entries), root_path)
        self._debug.write(
            "repo_snapshot",
            json.dumps([{"path": e.path, "content": e.content} for e in entries], indent=2),
            extension="json",
        )
        return entries

    def collect_directory_structure(self, root: str | Path) -> str:
        """Render the non-ignored files under ``root`` as a box-drawing tree."""
        root_path = _resolve_root(root)
        matcher = IgnoreMatcher.build(root_path)
        rel_paths: Sequence[str] = [
            path.relative_to(root_path).as_posix() for path in walk_files(root_path, matcher)
        ]
        return render_tree(sorted(rel_paths))


def _resolve_root(root: str | Path) -> Path:
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Repository path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Repository path is not a directory: {root}")
    return root_path


__all__ = ["IgnoreMatcher", "RepoCollector", "is_text_file", "walk_files"]
