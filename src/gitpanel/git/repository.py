"""High-level repository operations over a fixed set of git commands.

Read operations (status, diff, stats, branch queries) never raise: any git
failure degrades to an empty or zero result so a UI can keep rendering.
Mutating operations (stage, unstage, discard, commit) raise GitError and
leave the caller to report it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from gitpanel.config.schema import GitPanelConfig
from gitpanel.git.errors import GitCommandError, GitError, InvalidPathError, NotARepositoryError
from gitpanel.git.models import (
    EMPTY_STATS,
    EMPTY_STATUS,
    AheadBehind,
    DiffStats,
    FileDiff,
    RepositoryStatus,
)
from gitpanel.git.parser import parse_ahead_behind, parse_diff, parse_numstat, parse_status
from gitpanel.git.runner import CommandRunner

logger = logging.getLogger(__name__)

# ---- command whitelist ----

STATUS_V2 = ("status", "--porcelain=v2", "--branch")
STATUS_PORCELAIN = ("status", "--porcelain")
DIFF = ("diff", "--no-color")
DIFF_NUMSTAT = ("diff", "--stat", "--numstat")
DIFF_NUMSTAT_NO_INDEX = ("diff", "--numstat", "--no-index", "--", "/dev/null")
ADD = ("add",)
ADD_ALL = ("add", "-A")
RESTORE = ("restore",)
RESTORE_STAGED = ("restore", "--staged")
RESET_HEAD = ("reset", "HEAD")
COMMIT = ("commit", "-m")
SHOW_CURRENT_BRANCH = ("branch", "--show-current")
LOG_UNPUSHED = ("log", "@{u}..", "--oneline")
REV_LIST_AHEAD_BEHIND = ("rev-list", "--left-right", "--count", "@{u}...HEAD")
SHOW_TOPLEVEL = ("rev-parse", "--show-toplevel")

# "diff --no-index" exits 1 when the two inputs differ
_NO_INDEX_OK = (0, 1)


class Repository:
    """Git operations for a single working tree."""

    def __init__(
        self,
        path: Union[str, Path],
        runner: Optional[CommandRunner] = None,
        *,
        keep_unknown_codes: bool = False,
        strip_rename_score: bool = False,
    ) -> None:
        self.path = Path(path)
        self.runner = runner or CommandRunner()
        self.keep_unknown_codes = keep_unknown_codes
        self.strip_rename_score = strip_rename_score

    @classmethod
    def from_config(cls, path: Union[str, Path], config: GitPanelConfig) -> "Repository":
        runner = CommandRunner(git_binary=config.git.binary, timeout=config.git.timeout)
        return cls(
            path,
            runner,
            keep_unknown_codes=config.status.keep_unknown_codes,
            strip_rename_score=config.status.strip_rename_score,
        )

    @staticmethod
    def discover(path: Union[str, Path], runner: Optional[CommandRunner] = None) -> Path:
        """Return the top-level directory of the working tree containing *path*.

        Raises InvalidPathError if *path* is not an existing directory and
        NotARepositoryError if git does not recognise it as a working tree.
        GitSpawnError and GitTimeoutError propagate unchanged.
        """
        directory = Path(path)
        if not directory.is_dir():
            raise InvalidPathError(str(directory))
        runner = runner or CommandRunner()
        try:
            out = runner.run(SHOW_TOPLEVEL, directory)
        except GitCommandError as exc:
            raise NotARepositoryError(str(directory)) from exc
        if not out:
            raise NotARepositoryError(str(directory))
        return Path(out)

    def __repr__(self) -> str:
        return f"Repository({str(self.path)!r})"

    # ---- internals ----

    def _read(self, args: Sequence[str]) -> Optional[str]:
        """Run a read-only command; None on any failure."""
        try:
            return self.runner.run(args, self.path)
        except GitError as exc:
            logger.debug("read failed in %s: %s", self.path, exc)
            return None

    def _mutate(self, args: Sequence[str]) -> None:
        logger.debug("mutating %s: %s", self.path, " ".join(args[:2]))
        self.runner.run(args, self.path)

    # ---- status ----

    def status(self) -> RepositoryStatus:
        """Branch, tracking and per-file status; empty status on failure."""
        output = self._read(STATUS_V2)
        if output is None:
            return EMPTY_STATUS
        return parse_status(
            output,
            keep_unknown_codes=self.keep_unknown_codes,
            strip_rename_score=self.strip_rename_score,
        )

    def is_clean(self) -> bool:
        output = self._read(STATUS_PORCELAIN)
        return output is not None and output == ""

    # ---- diff ----

    def diff(self, file: Optional[str] = None, staged: bool = False) -> List[FileDiff]:
        """Unstaged (or, with *staged*, index) diff, optionally for one path."""
        args = list(DIFF)
        if staged:
            args.append("--staged")
        if file is not None:
            args.extend(["--", file])
        output = self._read(args)
        if not output:
            return []
        return parse_diff(output)

    def diff_stats(self, staged: bool = False, include_untracked: bool = True) -> DiffStats:
        """Totals from ``--numstat``.

        Untracked files are invisible to ``git diff``; unless *staged* is set
        they are sized one by one with a ``--no-index`` diff against
        /dev/null and added to the totals.
        """
        args = list(DIFF_NUMSTAT)
        if staged:
            args.append("--staged")
        output = self._read(args)
        if output is None:
            return EMPTY_STATS

        stats = parse_numstat(output)

        if include_untracked and not staged:
            for entry in self.status().untracked_files:
                result = self.runner.run_raw([*DIFF_NUMSTAT_NO_INDEX, entry.path], self.path)
                if result.exit_code in _NO_INDEX_OK and not result.timed_out:
                    stats += parse_numstat(result.stdout)
                else:
                    logger.debug("could not size untracked %s: %s", entry.path, result.stderr)

        return stats

    # ---- staging ----

    def stage(self, paths: Sequence[str]) -> None:
        if not paths:
            return
        self._mutate([*ADD, *paths])

    def unstage(self, paths: Sequence[str]) -> None:
        """Remove *paths* from the index, keeping working-tree changes."""
        if not paths:
            return
        self._mutate([*RESTORE_STAGED, *paths])

    def stage_all(self) -> None:
        self._mutate(ADD_ALL)

    def unstage_all(self) -> None:
        self._mutate(RESET_HEAD)

    def discard_changes(self, paths: Sequence[str]) -> None:
        """Restore *paths* in the working tree from the index."""
        if not paths:
            return
        self._mutate([*RESTORE, *paths])

    # ---- commit ----

    def commit(self, message: str) -> None:
        self._mutate([*COMMIT, message])

    # ---- branch info ----

    def current_branch(self) -> Optional[str]:
        output = self._read(SHOW_CURRENT_BRANCH)
        return output or None

    def has_unpushed_commits(self) -> bool:
        output = self._read(LOG_UNPUSHED)
        return bool(output)

    def ahead_behind(self) -> AheadBehind:
        """Commits ahead of / behind the upstream; (0, 0) without one."""
        output = self._read(REV_LIST_AHEAD_BEHIND)
        if output is None:
            return AheadBehind()
        return parse_ahead_behind(output)
