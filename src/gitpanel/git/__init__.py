"""Git interface layer: runner, parsers and the repository facade."""

from gitpanel.git.errors import (
    GitCommandError,
    GitError,
    GitSpawnError,
    GitTimeoutError,
    InvalidPathError,
    NotARepositoryError,
)
from gitpanel.git.models import (
    AheadBehind,
    CommandResult,
    DiffHunk,
    DiffLine,
    DiffLineKind,
    DiffStats,
    FileDiff,
    FileStatus,
    FileStatusKind,
    RepositoryStatus,
)
from gitpanel.git.parser import (
    DiffParser,
    parse_ahead_behind,
    parse_diff,
    parse_hunk_header,
    parse_numstat,
    parse_status,
)
from gitpanel.git.repository import Repository
from gitpanel.git.runner import CommandRunner

__all__ = [
    "AheadBehind",
    "CommandResult",
    "CommandRunner",
    "DiffHunk",
    "DiffLine",
    "DiffLineKind",
    "DiffParser",
    "DiffStats",
    "FileDiff",
    "FileStatus",
    "FileStatusKind",
    "GitCommandError",
    "GitError",
    "GitSpawnError",
    "GitTimeoutError",
    "InvalidPathError",
    "NotARepositoryError",
    "Repository",
    "RepositoryStatus",
    "parse_ahead_behind",
    "parse_diff",
    "parse_hunk_header",
    "parse_numstat",
    "parse_status",
]
