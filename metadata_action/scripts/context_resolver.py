"""
Build context resolution for the metadata action.

Provides ContextResolver, which turns the selected context source
("workflow" or "git") into the single BuildContext that tag, label and
annotation generation work from: the triggering event with its ref and SHA
corrected for the commit actually being built, plus that commit's date.
"""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from . import config
from .errors import ContextError, InvalidContextSourceError, MissingDataError
from .event_payload import (
    PullRequestEventPayload,
    is_pull_request_event,
    is_pull_request_target_event,
    parse_timestamp,
    payload_for,
)
from .git_operations import GitOperations
from .github_client import GitHubClient
from .workflow_event import WorkflowEvent

logger = logging.getLogger(__name__)


class ContextSource(str, Enum):
    """Where the build context comes from."""
    WORKFLOW = config.CONTEXT_WORKFLOW
    GIT = config.CONTEXT_GIT


@dataclass
class BuildContext:
    """
    Resolved context of the commit being built.

    Carries every field of the triggering workflow event, with ref and sha
    describing the commit under test, plus its commit date.
    """
    commit_date: datetime
    event_name: str = ""
    sha: str = ""
    ref: str = ""
    workflow: str = ""
    action: str = ""
    actor: str = ""
    job: str = ""
    run_number: int = 0
    run_id: int = 0
    run_attempt: int = 0
    repository: str = ""
    api_url: str = config.DEFAULT_API_URL
    server_url: str = config.DEFAULT_SERVER_URL
    graphql_url: str = config.DEFAULT_GRAPHQL_URL
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_event(cls, event: WorkflowEvent, commit_date: datetime) -> "BuildContext":
        return cls(
            commit_date=commit_date,
            event_name=event.event_name,
            sha=event.sha,
            ref=event.ref,
            workflow=event.workflow,
            action=event.action,
            actor=event.actor,
            job=event.job,
            run_number=event.run_number,
            run_id=event.run_id,
            run_attempt=event.run_attempt,
            repository=event.repo,
            api_url=event.api_url,
            server_url=event.server_url,
            graphql_url=event.graphql_url,
            payload=event.payload,
        )

    def to_dict(self, include_payload: bool = False) -> Dict[str, Any]:
        """
        Convert to a JSON-ready dict.

        Args:
            include_payload: Also emit the raw event payload
        """
        data = {
            "event_name": self.event_name,
            "sha": self.sha,
            "ref": self.ref,
            "commit_date": self.commit_date.isoformat(),
            "workflow": self.workflow,
            "action": self.action,
            "actor": self.actor,
            "job": self.job,
            "run_number": self.run_number,
            "run_id": self.run_id,
            "run_attempt": self.run_attempt,
            "repository": self.repository,
            "api_url": self.api_url,
            "server_url": self.server_url,
            "graphql_url": self.graphql_url,
        }
        if include_payload:
            data["payload"] = self.payload
        return data


def pr_head_sha_enabled(env: Optional[Mapping[str, str]] = None) -> bool:
    """
    Read the head SHA override flag (DOCKER_METADATA_PR_HEAD_SHA).

    Returns:
        True when the variable is "true", in any case
    """
    env = os.environ if env is None else env
    return env.get(config.ENV_PR_HEAD_SHA, "").strip().lower() == "true"


class ContextResolver:
    """
    Resolves the build context for one invocation.

    Collaborators are injected so resolution depends only on its arguments:
    event_source returns the current WorkflowEvent, git answers
    get_context() and get_commit_date(sha), and the optional github client
    answers get_commit_date(sha) when an event payload has no commit date.
    """

    def __init__(
        self,
        event_source: Callable[[], WorkflowEvent],
        git: Any,
        pr_head_sha: bool = False,
        github: Optional[Any] = None,
    ):
        """
        Initialize the resolver.

        Args:
            event_source: Callable returning the triggering WorkflowEvent
            git: Version-control source (e.g. GitOperations)
            pr_head_sha: Use the pull request head SHA instead of the merge
                commit SHA on pull request events
            github: Optional API source (e.g. GitHubClient) for commit dates
        """
        self.event_source = event_source
        self.git = git
        self.pr_head_sha = pr_head_sha
        self.github = github

    def resolve(self, source: Union[ContextSource, str]) -> BuildContext:
        """
        Resolve the build context from the given source.

        Args:
            source: "workflow" or "git"

        Returns:
            Fully resolved BuildContext

        Raises:
            InvalidContextSourceError: If source is not a known context source
            MissingDataError: If the event lacks data needed for the context
            GitOperationsError: If a git query fails (git source)
            GitHubClientError: If the commit date API fallback fails
        """
        try:
            source = ContextSource(source)
        except ValueError:
            raise InvalidContextSourceError(f"Invalid context source: {source}")

        if source is ContextSource.WORKFLOW:
            return self._resolve_from_workflow()
        return self._resolve_from_git()

    def _resolve_from_workflow(self) -> BuildContext:
        event = replace(self.event_source())
        pull_request = PullRequestEventPayload(event.event_name, event.payload)

        # pull_request_target runs on the base branch ref; describe the PR
        # merge ref instead.
        if is_pull_request_target_event(event.event_name):
            if pull_request.number is None:
                raise MissingDataError(
                    f"Pull request number missing from {event.event_name} event"
                )
            event.ref = config.PULL_REQUEST_MERGE_REF.format(number=pull_request.number)
            logger.debug(f"Using merge ref {event.ref} for {event.event_name}")

        if self.pr_head_sha and is_pull_request_event(event.event_name):
            head_sha = pull_request.head_sha
            if head_sha:
                logger.debug(f"Using pull request head SHA {head_sha} instead of {event.sha}")
                event.sha = head_sha

        commit_date = self._commit_date_from_workflow(event)
        logger.info(f"Workflow context: ref={event.ref} sha={event.sha} commit_date={commit_date.isoformat()}")
        return BuildContext.from_event(event, commit_date)

    def _commit_date_from_workflow(self, event: WorkflowEvent) -> datetime:
        if not event.event_path:
            raise MissingDataError(f"{config.ENV_EVENT_PATH} is not set")

        try:
            with open(event.event_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise MissingDataError(f"Cannot read event payload {event.event_path}: {e}")

        view = payload_for(event.event_name, data)
        timestamp = view.commit_timestamp()
        if timestamp is None:
            if self.github is not None:
                logger.info(f"No commit date in {view.kind} event payload, querying API for {event.sha}")
                return self.github.get_commit_date(event.sha)
            raise MissingDataError(
                f"Failed to get commit date from {event.event_name or 'unknown'} event"
            )

        try:
            return parse_timestamp(timestamp)
        except ValueError as e:
            raise MissingDataError(f"Invalid commit date {timestamp!r} in event payload: {e}")

    def _resolve_from_git(self) -> BuildContext:
        git_context = self.git.get_context()
        commit_date = self.git.get_commit_date(git_context.sha)

        event = replace(self.event_source(), sha=git_context.sha, ref=git_context.ref)
        logger.info(f"Git context: ref={event.ref} sha={event.sha} commit_date={commit_date.isoformat()}")
        return BuildContext.from_event(event, commit_date)


def get_context(
    source: Union[ContextSource, str],
    work_dir: Optional[str] = None,
    github_token: str = "",
    env: Optional[Mapping[str, str]] = None,
) -> BuildContext:
    """
    Resolve the build context from the runner environment.

    Wires WorkflowEvent.from_environ, GitOperations and, when a token is
    given, GitHubClient into a ContextResolver.

    Args:
        source: "workflow" or "git"
        work_dir: Checkout used by the git source (defaults to cwd)
        github_token: Token for the commit date API fallback
        env: Environment mapping (defaults to os.environ)
    """
    env = os.environ if env is None else env

    def event_source() -> WorkflowEvent:
        return WorkflowEvent.from_environ(env)

    github = None
    repo = env.get("GITHUB_REPOSITORY", "")
    if github_token and repo:
        github = GitHubClient(repo, github_token)

    resolver = ContextResolver(
        event_source=event_source,
        git=GitOperations(work_dir),
        pr_head_sha=pr_head_sha_enabled(env),
        github=github,
    )
    return resolver.resolve(source)
