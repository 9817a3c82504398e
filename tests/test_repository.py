"""Tests for the repository facade."""

from pathlib import Path

import pytest

from gitpanel.config.schema import GitPanelConfig
from gitpanel.git import repository as cmds
from gitpanel.git.errors import (
    GitCommandError,
    GitSpawnError,
    GitTimeoutError,
    InvalidPathError,
    NotARepositoryError,
)
from gitpanel.git.models import AheadBehind, CommandResult, DiffStats, FileStatusKind
from gitpanel.git.repository import Repository


class TestReadsWithFakeRunner:
    def test_status_parses_output(self, fake_runner, sample_status_v2):
        fake_runner.responses[cmds.STATUS_V2] = sample_status_v2
        status = Repository("/repo", fake_runner).status()
        assert status.branch == "main"
        assert len(status.files) == 9
        assert fake_runner.calls == [cmds.STATUS_V2]

    def test_status_failure_is_empty(self, fake_runner):
        status = Repository("/repo", fake_runner).status()
        assert status.files == ()
        assert status.branch is None

    def test_status_honours_parser_options(self, fake_runner):
        fake_runner.responses[cmds.STATUS_V2] = (
            "2 R. N... 100644 100644 100644 a b R90 new.py\told.py\n"
            "1 Z. N... 100644 100644 100644 a b odd.py\n"
        )
        repo = Repository("/repo", fake_runner, keep_unknown_codes=True, strip_rename_score=True)
        renamed, odd = repo.status().files
        assert renamed.path == "new.py"
        assert odd.staged_status == FileStatusKind.UNKNOWN

    def test_is_clean(self, fake_runner):
        repo = Repository("/repo", fake_runner)
        fake_runner.responses[cmds.STATUS_PORCELAIN] = ""
        assert repo.is_clean()
        fake_runner.responses[cmds.STATUS_PORCELAIN] = " M a.py"
        assert not repo.is_clean()

    def test_is_clean_false_on_failure(self, fake_runner):
        assert not Repository("/repo", fake_runner).is_clean()

    def test_diff_arguments(self, fake_runner, sample_diff_modified):
        fake_runner.responses[(*cmds.DIFF, "--staged", "--", "app.py")] = sample_diff_modified
        diffs = Repository("/repo", fake_runner).diff("app.py", staged=True)
        assert [d.path for d in diffs] == ["app.py"]

    def test_diff_empty_and_failure(self, fake_runner):
        fake_runner.responses[cmds.DIFF] = ""
        repo = Repository("/repo", fake_runner)
        assert repo.diff() == []
        assert repo.diff(staged=True) == []

    def test_diff_stats_adds_untracked(self, fake_runner):
        fake_runner.responses[cmds.DIFF_NUMSTAT] = "2\t1\ta.py\n"
        fake_runner.responses[cmds.STATUS_V2] = "? new.txt\n? blob.bin\n"
        fake_runner.responses[(*cmds.DIFF_NUMSTAT_NO_INDEX, "new.txt")] = CommandResult(
            exit_code=1, stdout="3\t0\tnew.txt", stderr=""
        )
        fake_runner.responses[(*cmds.DIFF_NUMSTAT_NO_INDEX, "blob.bin")] = CommandResult(
            exit_code=1, stdout="-\t-\tblob.bin", stderr=""
        )
        stats = Repository("/repo", fake_runner).diff_stats()
        assert stats == DiffStats(insertions=5, deletions=1, files=2)

    def test_diff_stats_skips_failed_untracked(self, fake_runner):
        fake_runner.responses[cmds.DIFF_NUMSTAT] = "1\t1\ta.py\n"
        fake_runner.responses[cmds.STATUS_V2] = "? broken.txt\n"
        fake_runner.responses[(*cmds.DIFF_NUMSTAT_NO_INDEX, "broken.txt")] = CommandResult(
            exit_code=128, stdout="", stderr="fatal"
        )
        assert Repository("/repo", fake_runner).diff_stats() == DiffStats(1, 1, 1)

    def test_diff_stats_staged_ignores_untracked(self, fake_runner):
        fake_runner.responses[(*cmds.DIFF_NUMSTAT, "--staged")] = "4\t0\tb.py\n"
        stats = Repository("/repo", fake_runner).diff_stats(staged=True)
        assert stats == DiffStats(4, 0, 1)
        assert cmds.STATUS_V2 not in fake_runner.calls

    def test_diff_stats_failure_is_zero(self, fake_runner):
        assert Repository("/repo", fake_runner).diff_stats() == DiffStats()

    def test_branch_queries(self, fake_runner):
        fake_runner.responses[cmds.SHOW_CURRENT_BRANCH] = "feature/x"
        fake_runner.responses[cmds.LOG_UNPUSHED] = "abc123 wip"
        fake_runner.responses[cmds.REV_LIST_AHEAD_BEHIND] = "1\t4"
        repo = Repository("/repo", fake_runner)
        assert repo.current_branch() == "feature/x"
        assert repo.has_unpushed_commits()
        assert repo.ahead_behind() == AheadBehind(ahead=4, behind=1)

    def test_branch_queries_without_upstream(self, fake_runner):
        fake_runner.responses[cmds.SHOW_CURRENT_BRANCH] = ""
        repo = Repository("/repo", fake_runner)
        assert repo.current_branch() is None
        assert not repo.has_unpushed_commits()
        assert repo.ahead_behind() == AheadBehind()


class TestMutationsWithFakeRunner:
    def test_stage_and_unstage_paths(self, fake_runner):
        fake_runner.responses[(*cmds.ADD, "a.py", "b.py")] = ""
        fake_runner.responses[(*cmds.RESTORE_STAGED, "a.py")] = ""
        repo = Repository("/repo", fake_runner)
        repo.stage(["a.py", "b.py"])
        repo.unstage(["a.py"])
        assert fake_runner.calls == [("add", "a.py", "b.py"), ("restore", "--staged", "a.py")]

    def test_empty_path_lists_run_nothing(self, fake_runner):
        repo = Repository("/repo", fake_runner)
        repo.stage([])
        repo.unstage([])
        repo.discard_changes([])
        assert fake_runner.calls == []

    def test_bulk_operations(self, fake_runner):
        for args in (cmds.ADD_ALL, cmds.RESET_HEAD, (*cmds.RESTORE, "x.py"), (*cmds.COMMIT, "msg")):
            fake_runner.responses[args] = ""
        repo = Repository("/repo", fake_runner)
        repo.stage_all()
        repo.unstage_all()
        repo.discard_changes(["x.py"])
        repo.commit("msg")
        assert fake_runner.calls == [
            ("add", "-A"), ("reset", "HEAD"), ("restore", "x.py"), ("commit", "-m", "msg"),
        ]

    def test_mutation_failure_propagates(self, fake_runner):
        with pytest.raises(GitCommandError):
            Repository("/repo", fake_runner).commit("nothing staged")


class TestConstruction:
    def test_from_config(self):
        cfg = GitPanelConfig()
        cfg.git.binary = "/opt/git"
        cfg.git.timeout = 5.0
        cfg.status.strip_rename_score = True
        repo = Repository.from_config("/repo", cfg)
        assert repo.runner.git_binary == "/opt/git"
        assert repo.runner.timeout == 5.0
        assert repo.strip_rename_score
        assert not repo.keep_unknown_codes

    def test_discover_missing_directory(self, tmp_path: Path):
        with pytest.raises(InvalidPathError):
            Repository.discover(tmp_path / "missing")

    def test_discover_file_is_invalid(self, tmp_path: Path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(InvalidPathError):
            Repository.discover(target)

    def test_discover_not_a_repo(self, tmp_path: Path):
        with pytest.raises(NotARepositoryError):
            Repository.discover(tmp_path)

    def test_discover_from_subdirectory(self, tmp_git_repo: Path):
        sub = tmp_git_repo / "pkg"
        sub.mkdir()
        assert Repository.discover(sub).resolve() == tmp_git_repo.resolve()

    def test_discover_missing_binary_is_not_masked(self, tmp_path: Path, fake_runner):
        fake_runner.responses[cmds.SHOW_TOPLEVEL] = GitSpawnError("git rev-parse --show-toplevel", "No such file")
        with pytest.raises(GitSpawnError):
            Repository.discover(tmp_path, fake_runner)

    def test_discover_timeout_is_not_masked(self, tmp_path: Path, fake_runner):
        fake_runner.responses[cmds.SHOW_TOPLEVEL] = GitTimeoutError("git rev-parse --show-toplevel", 5.0)
        with pytest.raises(GitTimeoutError):
            Repository.discover(tmp_path, fake_runner)


class TestAgainstRealRepository:
    def test_clean_after_init(self, tmp_git_repo: Path):
        repo = Repository(tmp_git_repo)
        assert repo.is_clean()
        status = repo.status()
        assert status.branch == "main"
        assert status.is_clean
        assert repo.current_branch() == "main"

    def test_modified_and_untracked(self, tmp_git_repo: Path):
        (tmp_git_repo / "app.py").write_text("a = 1\nb = 20\nc = 3\nd = 4\n")
        (tmp_git_repo / "notes.txt").write_text("one\ntwo\n")
        repo = Repository(tmp_git_repo)

        status = repo.status()
        assert [f.path for f in status.modified_files] == ["app.py"]
        assert [f.path for f in status.untracked_files] == ["notes.txt"]

        diffs = repo.diff()
        assert len(diffs) == 1
        assert diffs[0].additions == 2
        assert diffs[0].deletions == 1

        assert repo.diff_stats() == DiffStats(insertions=4, deletions=1, files=2)
        assert repo.diff_stats(include_untracked=False) == DiffStats(2, 1, 1)

    def test_stage_commit_cycle(self, tmp_git_repo: Path):
        (tmp_git_repo / "app.py").write_text("changed\n")
        repo = Repository(tmp_git_repo)

        repo.stage(["app.py"])
        assert [f.path for f in repo.status().staged_files] == ["app.py"]
        assert len(repo.diff(staged=True)) == 1

        repo.unstage(["app.py"])
        assert repo.status().staged_files == []

        repo.stage_all()
        repo.commit("update app")
        assert repo.is_clean()

    def test_discard_restores_file(self, tmp_git_repo: Path):
        target = tmp_git_repo / "app.py"
        target.write_text("garbage\n")
        Repository(tmp_git_repo).discard_changes(["app.py"])
        assert target.read_text() == "a = 1\nb = 2\nc = 3\n"

    def test_no_upstream(self, tmp_git_repo: Path):
        repo = Repository(tmp_git_repo)
        assert repo.ahead_behind() == AheadBehind()
        assert not repo.has_unpushed_commits()

    def test_commit_with_nothing_staged_raises(self, tmp_git_repo: Path):
        with pytest.raises(GitCommandError):
            Repository(tmp_git_repo).commit("empty")
