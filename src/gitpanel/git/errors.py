"""Exceptions raised by the git layer."""

from __future__ import annotations


class GitError(Exception):
    """Base class for every failure surfaced by the git layer."""


class GitSpawnError(GitError):
    """Raised when the git process could not be started at all."""

    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Could not run {command}: {reason}")


class GitCommandError(GitError):
    """Raised when git exits with a non-zero status."""

    def __init__(self, command: str, message: str, exit_code: int) -> None:
        self.command = command
        self.message = message
        self.exit_code = exit_code
        super().__init__(f"Git command failed: {command}\n{message}")


class GitTimeoutError(GitError):
    """Raised when git outlived the runner timeout and was killed."""

    def __init__(self, command: str, timeout: float) -> None:
        self.command = command
        self.timeout = timeout
        super().__init__(f"Git command timed out after {timeout:g}s: {command}")


class NotARepositoryError(GitError):
    """Raised when a directory is not inside a git working tree."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class InvalidPathError(GitError):
    """Raised when a repository path does not exist or is not a directory."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Invalid path: {path}")
