"""
Git operations helper for the metadata action.

This module answers the version-control questions the git context source
needs (current HEAD SHA and ref, commit date of a SHA), using subprocess
calls to git in a local checkout.
"""

import os
import subprocess
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from . import config


@dataclass
class GitContext:
    """HEAD commit and ref of a local checkout."""
    sha: str
    ref: str


class GitOperationsError(Exception):
    """Base exception for git operations errors."""
    pass


class GitOperations:
    """
    Local git queries for context resolution.

    All commands run in work_dir; nothing in the checkout is modified.
    """

    def __init__(self, work_dir: Optional[str] = None):
        """
        Initialize git operations.

        Args:
            work_dir: Local checkout path (defaults to the current directory)
        """
        self.work_dir = work_dir or os.getcwd()

    def _run_git(self, args: List[str]) -> str:
        """
        Run a git command and return output.

        Args:
            args: Command arguments (without 'git')

        Returns:
            Command output as string

        Raises:
            GitOperationsError: If command fails
        """
        cmd = ["git"] + args
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                cwd=self.work_dir,
            )
            return result.stdout.strip()
        except subprocess.CalledProcessError as e:
            raise GitOperationsError(f"git {' '.join(args)} failed: {e.stderr}")

    def get_commit_sha(self, ref: str = "HEAD") -> str:
        """
        Get commit SHA for a reference.

        Args:
            ref: Git reference (branch, tag, or "HEAD")

        Returns:
            Full commit SHA string

        Raises:
            GitOperationsError: If reference doesn't exist
        """
        return self._run_git(["rev-parse", ref])

    def is_head_detached(self) -> bool:
        """True when HEAD is not on a local branch."""
        return self._run_git(["branch", "--show-current"]) == ""

    def get_remotes(self) -> List[str]:
        """Names of the configured remotes (e.g. ["origin"])."""
        return self._run_git(["remote"]).split()

    def get_ref(self) -> str:
        """
        Get the fully qualified ref HEAD points at.

        On a branch this is the symbolic ref (refs/heads/<branch>). On a
        detached HEAD (tag or PR checkouts in CI) the ref is recovered from
        the decorations of the HEAD commit.

        Raises:
            GitOperationsError: If no ref can be determined
        """
        if not self.is_head_detached():
            return self._run_git(["symbolic-ref", "HEAD"])
        return self._get_detached_ref()

    def _get_detached_ref(self) -> str:
        output = self._run_git(["show", "-s", "--pretty=%D"])
        decorations = [d.strip() for d in output.split(",") if d.strip()]

        for decoration in decorations:
            if decoration.startswith("tag: "):
                return config.TAG_REF_PREFIX + decoration[len("tag: "):]

        for decoration in decorations:
            if decoration.startswith("pull/"):
                return f"refs/{decoration}"

        branches = [
            d for d in decorations
            if not d.startswith("HEAD") and not d.endswith("/HEAD")
        ]
        if branches:
            # <remote>/<branch> or a local branch, which may contain slashes
            remote, _, name = branches[0].partition("/")
            if name and remote in self.get_remotes():
                return config.BRANCH_REF_PREFIX + name
            return config.BRANCH_REF_PREFIX + branches[0]

        raise GitOperationsError(f"Cannot find detached HEAD ref in \"{output}\"")

    def get_context(self) -> GitContext:
        """
        Get HEAD SHA and ref of the checkout.

        Raises:
            GitOperationsError: If the checkout has no commits
        """
        return GitContext(sha=self.get_commit_sha("HEAD"), ref=self.get_ref())

    def get_commit_date(self, sha: str) -> datetime:
        """
        Get the committer date of a commit.

        Args:
            sha: Commit SHA

        Returns:
            Timezone-aware committer date

        Raises:
            GitOperationsError: If the SHA is unknown or the date is unparsable
        """
        output = self._run_git(["show", "-s", "--format=%cI", sha])
        try:
            return datetime.fromisoformat(output)
        except ValueError:
            raise GitOperationsError(f"Unexpected commit date for {sha}: {output!r}")
