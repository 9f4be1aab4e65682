"""
Unit tests for git_operations module.

These tests verify the git command wrapper functionality by mocking
subprocess calls to avoid actual git operations.
"""

import subprocess
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch

import pytest

from metadata_action.scripts.git_operations import (
    GitContext,
    GitOperations,
    GitOperationsError,
)


SHA = "abc1234567890abcdef1234567890abcdef123456"


@pytest.fixture
def git_ops():
    """Create a GitOperations instance for testing."""
    return GitOperations(work_dir="/tmp/test-repo")


def git_outputs(outputs):
    """Build a subprocess.run side effect keyed by git subcommand."""
    def run(cmd, **kwargs):
        key = " ".join(cmd[1:])
        for prefix, stdout in outputs.items():
            if key.startswith(prefix):
                if isinstance(stdout, Exception):
                    raise stdout
                return Mock(returncode=0, stdout=stdout, stderr="")
        raise AssertionError(f"unexpected git call: {cmd}")
    return run


class TestGitOperationsInit:
    """Tests for GitOperations initialization."""

    def test_init_with_work_dir(self):
        ops = GitOperations(work_dir="/path/to/dir")
        assert ops.work_dir == "/path/to/dir"

    @patch("os.getcwd", return_value="/current")
    def test_init_defaults_to_cwd(self, mock_getcwd):
        ops = GitOperations()
        assert ops.work_dir == "/current"


class TestRunGit:
    """Tests for the git command wrapper."""

    @patch("subprocess.run")
    def test_runs_in_work_dir(self, mock_run, git_ops):
        mock_run.return_value = Mock(returncode=0, stdout="out\n", stderr="")

        assert git_ops._run_git(["status"]) == "out"
        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "status"]
        assert kwargs["cwd"] == "/tmp/test-repo"
        assert kwargs["check"] is True

    @patch("subprocess.run")
    def test_failure_raises(self, mock_run, git_ops):
        mock_run.side_effect = subprocess.CalledProcessError(
            128, "git", stderr="fatal: not a git repository"
        )

        with pytest.raises(GitOperationsError) as exc_info:
            git_ops._run_git(["status"])

        assert "not a git repository" in str(exc_info.value)


class TestGetCommitSha:
    """Tests for get_commit_sha operation."""

    @patch("subprocess.run")
    def test_get_commit_sha_head(self, mock_run, git_ops):
        mock_run.return_value = Mock(returncode=0, stdout=SHA + "\n", stderr="")

        assert git_ops.get_commit_sha() == SHA
        call_args = mock_run.call_args[0][0]
        assert "rev-parse" in call_args
        assert "HEAD" in call_args

    @patch("subprocess.run")
    def test_no_commits(self, mock_run, git_ops):
        mock_run.side_effect = subprocess.CalledProcessError(
            128, "git", stderr="fatal: ambiguous argument 'HEAD'"
        )

        with pytest.raises(GitOperationsError):
            git_ops.get_commit_sha()


class TestGetRef:
    """Tests for get_ref operation."""

    @patch("subprocess.run")
    def test_branch(self, mock_run, git_ops):
        mock_run.side_effect = git_outputs({
            "branch --show-current": "main\n",
            "symbolic-ref HEAD": "refs/heads/main\n",
        })

        assert git_ops.get_ref() == "refs/heads/main"

    @patch("subprocess.run")
    def test_detached_tag(self, mock_run, git_ops):
        mock_run.side_effect = git_outputs({
            "branch --show-current": "\n",
            "show -s --pretty=%D": "HEAD, tag: v1.2.3, origin/main\n",
        })

        assert git_ops.get_ref() == "refs/tags/v1.2.3"

    @patch("subprocess.run")
    def test_detached_pull_request(self, mock_run, git_ops):
        mock_run.side_effect = git_outputs({
            "branch --show-current": "",
            "show -s --pretty=%D": "HEAD, pull/15/merge\n",
        })

        assert git_ops.get_ref() == "refs/pull/15/merge"

    @patch("subprocess.run")
    def test_detached_remote_branch(self, mock_run, git_ops):
        mock_run.side_effect = git_outputs({
            "branch --show-current": "",
            "show -s --pretty=%D": "HEAD, origin/feature/login\n",
            "remote": "origin\nupstream\n",
        })

        assert git_ops.get_ref() == "refs/heads/feature/login"

    @patch("subprocess.run")
    def test_detached_local_branch_with_slash(self, mock_run, git_ops):
        mock_run.side_effect = git_outputs({
            "branch --show-current": "",
            "show -s --pretty=%D": "HEAD, feature/x\n",
            "remote": "origin\n",
        })

        assert git_ops.get_ref() == "refs/heads/feature/x"

    @patch("subprocess.run")
    def test_detached_skips_remote_head(self, mock_run, git_ops):
        mock_run.side_effect = git_outputs({
            "branch --show-current": "",
            "show -s --pretty=%D": "HEAD, origin/HEAD, origin/main\n",
            "remote": "origin\n",
        })

        assert git_ops.get_ref() == "refs/heads/main"

    @patch("subprocess.run")
    def test_detached_without_decorations(self, mock_run, git_ops):
        mock_run.side_effect = git_outputs({
            "branch --show-current": "",
            "show -s --pretty=%D": "HEAD\n",
        })

        with pytest.raises(GitOperationsError) as exc_info:
            git_ops.get_ref()

        assert "detached HEAD" in str(exc_info.value)


class TestGetContext:
    """Tests for get_context operation."""

    @patch("subprocess.run")
    def test_sha_and_ref(self, mock_run, git_ops):
        mock_run.side_effect = git_outputs({
            "rev-parse HEAD": SHA + "\n",
            "branch --show-current": "main\n",
            "symbolic-ref HEAD": "refs/heads/main\n",
        })

        assert git_ops.get_context() == GitContext(sha=SHA, ref="refs/heads/main")


class TestGetCommitDate:
    """Tests for get_commit_date operation."""

    @patch("subprocess.run")
    def test_parses_committer_date(self, mock_run, git_ops):
        mock_run.return_value = Mock(returncode=0, stdout="2024-01-02T03:04:05+01:00\n", stderr="")

        commit_date = git_ops.get_commit_date(SHA)

        assert commit_date == datetime(2024, 1, 2, 2, 4, 5, tzinfo=timezone.utc)
        assert commit_date.utcoffset() == timedelta(hours=1)
        call_args = mock_run.call_args[0][0]
        assert call_args == ["git", "show", "-s", "--format=%cI", SHA]

    @patch("subprocess.run")
    def test_unknown_sha(self, mock_run, git_ops):
        mock_run.side_effect = subprocess.CalledProcessError(
            128, "git", stderr="fatal: bad object deadbeef"
        )

        with pytest.raises(GitOperationsError) as exc_info:
            git_ops.get_commit_date("deadbeef")

        assert "bad object" in str(exc_info.value)

    @patch("subprocess.run")
    def test_unparsable_date(self, mock_run, git_ops):
        mock_run.return_value = Mock(returncode=0, stdout="not-a-date\n", stderr="")

        with pytest.raises(GitOperationsError):
            git_ops.get_commit_date(SHA)


class TestGetRemotes:
    """Tests for get_remotes operation."""

    @patch("subprocess.run")
    def test_lists_remotes(self, mock_run, git_ops):
        mock_run.return_value = Mock(returncode=0, stdout="origin\nupstream\n", stderr="")

        assert git_ops.get_remotes() == ["origin", "upstream"]
        assert mock_run.call_args[0][0] == ["git", "remote"]

    @patch("subprocess.run")
    def test_no_remotes(self, mock_run, git_ops):
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")

        assert git_ops.get_remotes() == []
