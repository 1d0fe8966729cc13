"""Commit history collection and churn (hotspot) aggregation."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List

from ..logging import get_logger
from ..models import ChangeKind, CommitHistory, CommitRecord, FileChange, FileStat

logger = get_logger("git.history")

COMMIT_MARKER = "<<<COMMIT_START>>>"
HEADER_END_MARKER = "<<<HEADER_END>>>"

# The parser below depends on this exact layout: one field per line, body last.
LOG_FORMAT = "%n".join(
    (COMMIT_MARKER, "%H", "%h", "%an", "%ae", "%aI", "%s", "%b", HEADER_END_MARKER)
)

DEFAULT_LIMIT = 50

_HEADER_FIELDS = 6
_NOT_COUNTABLE = "-"


@dataclass
class _HotspotAccumulator:
    commit_count: int = 0
    lines_added: int = 0
    lines_deleted: int = 0


class CommitHistoryCollector:
    """Reads recent non-merge commits with numstat output and ranks hotspots."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner

    def collect(self, repo_path: str | Path, limit: int = DEFAULT_LIMIT) -> CommitHistory:
        """Return commits (newest first) and hotspots for ``repo_path``.

        Any failure to run ``git log`` yields an empty history so documentation
        can still be produced for directories that are not repositories.
        """
        args = [
            "git",
            "log",
            f"--format={LOG_FORMAT}",
            "--numstat",
            "--no-merges",
            "-n",
            str(limit),
        ]
        try:
            raw_log = self._runner(args, cwd=Path(repo_path))
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Failed to fetch git log, returning empty history: %s", exc)
            return CommitHistory()
        history = parse_log(raw_log)
        logger.debug(
            "Parsed %d commits and %d hotspots from %s",
            len(history.commits),
            len(history.hotspots),
            repo_path,
        )
        return history

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
        )
        return completed.stdout


def parse_log(raw_log: str) -> CommitHistory:
    """Parse ``git log`` output produced with :data:`LOG_FORMAT` and ``--numstat``."""
    commits: List[CommitRecord] = []
    hotspots: Dict[str, _HotspotAccumulator] = {}

    for chunk in raw_log.split(COMMIT_MARKER):
        if not chunk.strip():
            continue
        header, separator, diff = chunk.partition(HEADER_END_MARKER)
        if not separator:
            continue

        header_lines = header.strip().split("\n")
        if len(header_lines) < _HEADER_FIELDS:
            continue
        commit_id, short_id, author_name, author_email, author_time, subject = header_lines[
            :_HEADER_FIELDS
        ]
        body = "\n".join(header_lines[_HEADER_FIELDS:])

        changes: List[FileChange] = []
        for line in diff.strip().split("\n"):
            change = _parse_numstat_line(line)
            if change is None:
                continue
            changes.append(change)
            stats = hotspots.setdefault(change.new_path, _HotspotAccumulator())
            stats.commit_count += 1
            stats.lines_added += change.lines_added
            stats.lines_deleted += change.lines_deleted

        commits.append(
            CommitRecord(
                id=commit_id,
                short_id=short_id,
                author_name=author_name,
                author_email=author_email,
                author_time=author_time,
                subject=subject,
                body=body,
                changes=tuple(changes),
            )
        )

    ranked = sorted(hotspots.items(), key=lambda item: item[1].commit_count, reverse=True)
    return CommitHistory(
        commits=tuple(commits),
        hotspots=tuple(
            FileStat(
                path=path,
                commit_count=stats.commit_count,
                lines_added=stats.lines_added,
                lines_deleted=stats.lines_deleted,
            )
            for path, stats in ranked
        ),
    )


def _parse_numstat_line(line: str) -> FileChange | None:
    parts = line.split("\t")
    if len(parts) < 3:
        return None
    # numstat cannot tell adds, deletes and renames apart; every entry is a modify.
    return FileChange(
        kind=ChangeKind.MODIFY,
        new_path=parts[2],
        lines_added=_parse_count(parts[0]),
        lines_deleted=_parse_count(parts[1]),
    )


def _parse_count(value: str) -> int:
    value = value.strip()
    if value == _NOT_COUNTABLE:
        return 0
    try:
        return max(int(value), 0)
    except ValueError:
        return 0


__all__ = [
    "COMMIT_MARKER",
    "CommitHistoryCollector",
    "HEADER_END_MARKER",
    "LOG_FORMAT",
    "parse_log",
]
