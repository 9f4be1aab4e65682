"""
GitHub API client wrapper for the metadata action.

This module provides a thin wrapper around the GitHub API lookups the
context resolver falls back to when an event payload does not carry the
commit date. It uses the `gh` CLI for authentication and API access.
"""

import os
import subprocess
from datetime import datetime
from typing import List, Optional

from .event_payload import parse_timestamp


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""
    pass


class GitHubClient:
    """
    GitHub API client for commit lookups.

    Uses the `gh` CLI for authentication and API access.
    All methods are repository-scoped.
    """

    def __init__(self, repo: str, token: Optional[str] = None):
        """
        Initialize the GitHub client.

        Args:
            repo: Repository in format "owner/name"
            token: Optional GitHub token (uses gh CLI auth if not provided)
        """
        self.repo = repo
        self.token = token

    def _run_gh(self, args: List[str]) -> str:
        """
        Run a gh CLI command and return output.

        Args:
            args: Command arguments (without 'gh')

        Returns:
            Command output as string

        Raises:
            GitHubClientError: If command fails
        """
        cmd = ["gh"] + args
        if self.token:
            # Extend environment with GH_TOKEN, don't replace it
            env = {**os.environ, "GH_TOKEN": self.token}
        else:
            env = None

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                env=env
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitHubClientError(f"gh command failed: {e.stderr}")

    def get_commit_date(self, sha: str) -> datetime:
        """
        Get the committer date of a commit through the commits API.

        Args:
            sha: Commit SHA

        Returns:
            Timezone-aware committer date

        Raises:
            GitHubClientError: If the lookup fails or returns no date
        """
        output = self._run_gh([
            "api", f"repos/{self.repo}/commits/{sha}",
            "--jq", ".commit.committer.date"
        ]).strip()
        if not output or output == "null":
            raise GitHubClientError(f"No committer date for {sha} in {self.repo}")
        try:
            return parse_timestamp(output)
        except ValueError:
            raise GitHubClientError(f"Unexpected committer date for {sha}: {output!r}")
