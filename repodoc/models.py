"""Core data models shared across repodoc components."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class FileEntry:
    """A text file collected from the repository."""

    path: str
    content: str


class ChangeKind(str, Enum):
    """Kind of change recorded for a file in a commit."""

    ADD = "add"
    DELETE = "delete"
    MODIFY = "modify"
    RENAME = "rename"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FileChange:
    """Per-file line statistics for a single commit."""

    kind: ChangeKind
    new_path: str
    lines_added: int
    lines_deleted: int
    old_path: Optional[str] = None


@dataclass(frozen=True)
class CommitRecord:
    """Structured view of one commit from the inspected history window."""

    id: str
    short_id: str
    author_name: str
    author_email: str
    author_time: str
    subject: str
    body: str
    changes: Tuple[FileChange, ...] = ()

    @property
    def files_changed(self) -> int:
        return len(self.changes)

    @property
    def insertions(self) -> int:
        return sum(change.lines_added for change in self.changes)

    @property
    def deletions(self) -> int:
        return sum(change.lines_deleted for change in self.changes)


@dataclass(frozen=True)
class FileStat:
    """Churn statistics for a path accumulated across commits (a hotspot)."""

    path: str
    commit_count: int
    lines_added: int
    lines_deleted: int


@dataclass(frozen=True)
class CommitHistory:
    """Commits and hotspots returned by the history collector."""

    commits: Tuple[CommitRecord, ...] = ()
    hotspots: Tuple[FileStat, ...] = ()


@dataclass(frozen=True)
class RepositoryContext:
    """Everything collected about a repository for one analysis run."""

    project_name: str
    timestamp: str
    branch: str
    directory_tree: str
    files: Tuple[FileEntry, ...] = ()
    hotspots: Tuple[FileStat, ...] = ()
    commits: Tuple[CommitRecord, ...] = ()


@dataclass(frozen=True)
class CacheHandle:
    """Remote cached copy of a serialized repository context."""

    name: str
    display_name: str
    model: Optional[str] = None
    expire_time: Optional[str] = None
