"""Shared test fixtures — sample git output, fake runner, temp git repos."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest

from gitpanel.git.errors import GitCommandError
from gitpanel.git.models import CommandResult
from gitpanel.git.runner import CommandRunner


class FakeRunner(CommandRunner):
    """CommandRunner that answers from a table instead of spawning git.

    Responses are keyed by the argument tuple.  A string is returned as
    stdout, a GitError instance is raised, a CommandResult is returned
    as-is from run_raw().  Unknown commands fail with exit code 128.
    """

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], object]] = None) -> None:
        super().__init__(git_binary="git", timeout=5.0)
        self.responses: Dict[Tuple[str, ...], object] = dict(responses or {})
        self.calls: List[Tuple[str, ...]] = []

    def _result(self, args: Sequence[str]) -> Union[CommandResult, Exception]:
        key = tuple(args)
        self.calls.append(key)
        if key not in self.responses:
            return CommandResult(exit_code=128, stdout="", stderr=f"fatal: unexpected {key}")
        value = self.responses[key]
        if isinstance(value, Exception):
            return value
        if isinstance(value, CommandResult):
            return value
        return CommandResult(exit_code=0, stdout=str(value), stderr="")

    def run(self, args, cwd) -> str:
        result = self._result(args)
        if isinstance(result, Exception):
            raise result
        if result.exit_code != 0:
            raise GitCommandError(self.command_line(args), result.stderr or result.stdout, result.exit_code)
        return result.stdout

    def run_raw(self, args, cwd) -> CommandResult:
        result = self._result(args)
        if isinstance(result, Exception):
            return CommandResult(exit_code=-1, stdout="", stderr=str(result))
        return result


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def sample_status_v2() -> str:
    """Porcelain v2 output covering every entry type."""
    return textwrap.dedent("""\
        # branch.oid 1234567890abcdef1234567890abcdef12345678
        # branch.head main
        # branch.upstream origin/main
        # branch.ab +2 -1
        1 M. N... 100644 100644 100644 abc123 def456 staged.py
        1 .M N... 100644 100644 100644 abc123 abc123 src/edited file.py
        1 MM N... 100644 100644 100644 abc123 def456 both.py
        1 A. N... 000000 100644 100644 0000000 def456 new.py
        1 .D N... 100644 100644 000000 abc123 abc123 gone.py
        2 R. N... 100644 100644 100644 abc123 abc123 R100 renamed.py\told.py
        u UU N... 100644 100644 100644 100644 aaa111 bbb222 ccc333 conflict.py
        ? untracked.txt
        ? docs/notes with space.md
    """)


@pytest.fixture
def sample_diff_modified() -> str:
    """One file, one hunk: 2 additions, 1 deletion, 4 context lines."""
    return textwrap.dedent("""\
        diff --git a/app.py b/app.py
        index 1234567..abcdef0 100644
        --- a/app.py
        +++ b/app.py
        @@ -1,5 +1,6 @@ def main():
         import os
        -import sys
        +import sys, json
        +import logging

         def main():
             pass
    """)


@pytest.fixture
def sample_diff_multi() -> str:
    """Two files: a modified one with two hunks and a new file."""
    return textwrap.dedent("""\
        diff --git a/lib/util.py b/lib/util.py
        index 1111111..2222222 100644
        --- a/lib/util.py
        +++ b/lib/util.py
        @@ -10,3 +10,3 @@
         a = 1
        -b = 2
        +b = 3
         c = 4
        @@ -40 +40,2 @@
         tail
        +more
        diff --git a/hello.py b/hello.py
        new file mode 100644
        index 0000000..e69de29
        --- /dev/null
        +++ b/hello.py
        @@ -0,0 +1,2 @@
        +def greet(name):
        +    return f"Hello, {name}!"
    """)


@pytest.fixture
def sample_diff_binary() -> str:
    return textwrap.dedent("""\
        diff --git a/image.png b/image.png
        new file mode 100644
        index 0000000..abc1234
        Binary files /dev/null and b/image.png differ
    """)


@pytest.fixture
def sample_diff_rename() -> str:
    return textwrap.dedent("""\
        diff --git a/old_name.py b/new_name.py
        similarity index 90%
        rename from old_name.py
        rename to new_name.py
        index abc1234..def5678 100644
        --- a/old_name.py
        +++ b/new_name.py
        @@ -1,2 +1,2 @@
         keep = True
        -old = 1
        +new = 1
    """)


@pytest.fixture
def sample_diff_deleted() -> str:
    return textwrap.dedent("""\
        diff --git a/obsolete.py b/obsolete.py
        deleted file mode 100644
        index abc1234..0000000
        --- a/obsolete.py
        +++ /dev/null
        @@ -1,2 +0,0 @@
        -x = 1
        -y = 2
    """)


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, capture_output=True, check=True)


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository with one commit on ``main``."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo, "config", "user.email", "test@test.com")
    _git(repo, "config", "user.name", "Test")
    _git(repo, "config", "commit.gpgsign", "false")
    (repo / "README.md").write_text("# Test\n")
    (repo / "app.py").write_text("a = 1\nb = 2\nc = 3\n")
    _git(repo, "add", ".")
    _git(repo, "commit", "-m", "init")
    return repo
