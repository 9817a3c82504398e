"""Data models for status, diff and numstat parsing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class FileStatusKind(str, Enum):
    UNTRACKED = "untracked"
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    UNMERGED = "unmerged"
    IGNORED = "ignored"
    UNKNOWN = "unknown"  # code outside the porcelain table

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def symbol(self) -> str:
        return _KIND_SYMBOLS[self]


_KIND_SYMBOLS = {
    FileStatusKind.UNTRACKED: "?",
    FileStatusKind.MODIFIED: "M",
    FileStatusKind.ADDED: "A",
    FileStatusKind.DELETED: "D",
    FileStatusKind.RENAMED: "R",
    FileStatusKind.COPIED: "C",
    FileStatusKind.UNMERGED: "U",
    FileStatusKind.IGNORED: "!",
    FileStatusKind.UNKNOWN: "X",
}

# Porcelain XY code → kind.  "." means "no change on this side".
STATUS_CODES: dict[str, FileStatusKind] = {
    "?": FileStatusKind.UNTRACKED,
    "M": FileStatusKind.MODIFIED,
    "T": FileStatusKind.MODIFIED,  # type change
    "A": FileStatusKind.ADDED,
    "D": FileStatusKind.DELETED,
    "R": FileStatusKind.RENAMED,
    "C": FileStatusKind.COPIED,
    "U": FileStatusKind.UNMERGED,
    "!": FileStatusKind.IGNORED,
}


def status_kind_from_code(code: str, *, keep_unknown: bool = False) -> Optional[FileStatusKind]:
    """Map one porcelain status character to a kind.

    ``"."`` is always ``None``.  Characters outside the table collapse to
    ``None`` unless *keep_unknown* is set, in which case they become
    ``FileStatusKind.UNKNOWN``.
    """
    if code == ".":
        return None
    kind = STATUS_CODES.get(code)
    if kind is None and keep_unknown:
        return FileStatusKind.UNKNOWN
    return kind


@dataclass(frozen=True)
class FileStatus:
    """Status of a single path in one status snapshot."""

    path: str
    original_path: Optional[str] = None  # set on renames / copies
    staged_status: Optional[FileStatusKind] = None
    unstaged_status: Optional[FileStatusKind] = None

    @property
    def is_staged(self) -> bool:
        return self.staged_status is not None and self.staged_status != FileStatusKind.UNTRACKED

    @property
    def has_unstaged_changes(self) -> bool:
        return self.unstaged_status is not None and self.unstaged_status != FileStatusKind.UNTRACKED

    @property
    def is_untracked(self) -> bool:
        return FileStatusKind.UNTRACKED in (self.staged_status, self.unstaged_status)

    @property
    def has_conflicts(self) -> bool:
        return FileStatusKind.UNMERGED in (self.staged_status, self.unstaged_status)

    @property
    def file_name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def directory(self) -> str:
        head, sep, _ = self.path.rstrip("/").rpartition("/")
        return head if sep else ""


@dataclass(frozen=True)
class RepositoryStatus:
    """Branch tracking info plus per-file status, in porcelain order."""

    branch: Optional[str] = None
    upstream: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    files: Tuple[FileStatus, ...] = ()

    @property
    def staged_files(self) -> list[FileStatus]:
        return [f for f in self.files if f.is_staged]

    @property
    def modified_files(self) -> list[FileStatus]:
        return [f for f in self.files if f.has_unstaged_changes and not f.is_untracked]

    @property
    def untracked_files(self) -> list[FileStatus]:
        return [f for f in self.files if f.is_untracked]

    @property
    def conflicted_files(self) -> list[FileStatus]:
        return [f for f in self.files if f.has_conflicts]

    @property
    def is_clean(self) -> bool:
        return not self.files

    @property
    def has_staged(self) -> bool:
        return bool(self.staged_files)

    @property
    def has_unpushed(self) -> bool:
        return self.ahead > 0


class DiffLineKind(str, Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"
    HEADER = "header"
    HUNK_HEADER = "hunk_header"

    @property
    def prefix(self) -> str:
        if self is DiffLineKind.ADDITION:
            return "+"
        if self is DiffLineKind.DELETION:
            return "-"
        if self is DiffLineKind.CONTEXT:
            return " "
        return ""


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single line of a unified diff, marker stripped."""

    kind: DiffLineKind
    content: str
    old_line_number: Optional[int] = None
    new_line_number: Optional[int] = None


@dataclass(frozen=True)
class DiffHunk:
    """One ``@@`` section; counts come from the header and are not verified."""

    header: str  # e.g. "@@ -10,5 +10,7 @@"
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: Tuple[DiffLine, ...] = ()


@dataclass(frozen=True)
class FileDiff:
    """Diff for a single file."""

    path: str
    old_path: Optional[str] = None  # set on renames
    is_binary: bool = False
    hunks: Tuple[DiffHunk, ...] = ()

    @property
    def additions(self) -> int:
        return sum(1 for h in self.hunks for ln in h.lines if ln.kind == DiffLineKind.ADDITION)

    @property
    def deletions(self) -> int:
        return sum(1 for h in self.hunks for ln in h.lines if ln.kind == DiffLineKind.DELETION)


@dataclass(frozen=True)
class DiffStats:
    """Insertion / deletion / file totals from ``--numstat`` output."""

    insertions: int = 0
    deletions: int = 0
    files: int = 0

    def __add__(self, other: "DiffStats") -> "DiffStats":
        if not isinstance(other, DiffStats):
            return NotImplemented
        return DiffStats(
            insertions=self.insertions + other.insertions,
            deletions=self.deletions + other.deletions,
            files=self.files + other.files,
        )


@dataclass(frozen=True)
class AheadBehind:
    """Commit counts relative to the upstream branch."""

    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class CommandResult:
    """Uninterpreted outcome of one git invocation."""

    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


EMPTY_STATUS = RepositoryStatus()
EMPTY_STATS = DiffStats()
