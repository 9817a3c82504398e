"""Git subprocess runner."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from pathlib import Path
from typing import Sequence, Union

from gitpanel.git.errors import GitCommandError, GitSpawnError, GitTimeoutError
from gitpanel.git.models import CommandResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Exit codes reported by run_raw() when git never produced one
SPAWN_FAILED_EXIT = -1
TIMED_OUT_EXIT = -2

PathLike = Union[str, Path]


class CommandRunner:
    """Run git in a working directory and capture its output.

    A runner holds no per-repository state, so one instance may be shared by
    several repositories or swapped for a fake in tests.
    """

    def __init__(self, git_binary: str = "git", timeout: float = DEFAULT_TIMEOUT) -> None:
        self.git_binary = git_binary
        self.timeout = timeout

    def command_line(self, args: Sequence[str]) -> str:
        return " ".join([self.git_binary, *args])

    def _execute(self, args: Sequence[str], cwd: PathLike) -> CommandResult:
        """Run git once. Raises GitSpawnError / GitTimeoutError."""
        command = self.command_line(args)
        logger.debug("running %s in %s", command, cwd)
        try:
            # run() waits on the child natively and kills it once the
            # timeout elapses, then reaps it before raising.
            result = subprocess.run(
                [self.git_binary, *args],
                cwd=cwd,
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", command, self.timeout)
            raise GitTimeoutError(command, self.timeout) from None
        except OSError as exc:
            logger.warning("could not start %s: %s", command, exc)
            raise GitSpawnError(command, str(exc)) from exc

        return CommandResult(
            exit_code=result.returncode,
            stdout=result.stdout.decode("utf-8", errors="replace").strip(),
            stderr=result.stderr.decode("utf-8", errors="replace").strip(),
        )

    def run(self, args: Sequence[str], cwd: PathLike) -> str:
        """Run git and return trimmed stdout.

        Raises GitCommandError on a non-zero exit (message is stderr, or
        stdout when stderr is empty), GitTimeoutError when the process was
        killed for running too long, GitSpawnError when it never started.
        """
        result = self._execute(args, cwd)
        if result.exit_code != 0:
            raise GitCommandError(
                command=self.command_line(args),
                message=result.stderr or result.stdout,
                exit_code=result.exit_code,
            )
        return result.stdout

    async def run_async(self, args: Sequence[str], cwd: PathLike) -> str:
        """Same as run(), executed on the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.run, list(args), cwd)

    def run_raw(self, args: Sequence[str], cwd: PathLike) -> CommandResult:
        """Run git and return exit code and both streams, uninterpreted.

        For commands where a non-zero exit carries meaning (``diff
        --no-index`` exits 1 when the inputs differ).  Timeouts and spawn
        failures are folded into the result instead of raised.
        """
        try:
            return self._execute(args, cwd)
        except GitTimeoutError as exc:
            return CommandResult(
                exit_code=TIMED_OUT_EXIT,
                stdout="",
                stderr=str(exc),
                timed_out=True,
            )
        except GitSpawnError as exc:
            return CommandResult(exit_code=SPAWN_FAILED_EXIT, stdout="", stderr=exc.reason)
