"""
Workflow event source for the metadata action.

Wraps the ambient GitHub Actions environment (GITHUB_* variables and the
event payload file) in an explicit WorkflowEvent value, so consumers receive
the current event as an argument instead of reading process-wide state.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from . import config
from .errors import MissingDataError

logger = logging.getLogger(__name__)


@dataclass
class WorkflowEvent:
    """The event that triggered the current workflow run."""
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
    event_path: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_environ(cls, env: Optional[Mapping[str, str]] = None) -> "WorkflowEvent":
        """
        Build the event from the runner environment.

        The payload is loaded from GITHUB_EVENT_PATH when that file exists;
        otherwise it is left empty and a warning is logged.

        Args:
            env: Environment mapping (defaults to os.environ)

        Raises:
            MissingDataError: If the event file is not a JSON object
        """
        env = os.environ if env is None else env

        event_path = env.get(config.ENV_EVENT_PATH, "")
        payload: Dict[str, Any] = {}
        if event_path:
            if os.path.exists(event_path):
                try:
                    with open(event_path, encoding="utf-8") as f:
                        payload = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    raise MissingDataError(f"Cannot read event payload {event_path}: {e}")
                if not isinstance(payload, dict):
                    raise MissingDataError(f"Event payload {event_path} is not a JSON object")
            else:
                logger.warning(f"{config.ENV_EVENT_PATH} {event_path} does not exist")

        return cls(
            event_name=env.get("GITHUB_EVENT_NAME", ""),
            sha=env.get("GITHUB_SHA", ""),
            ref=env.get("GITHUB_REF", ""),
            workflow=env.get("GITHUB_WORKFLOW", ""),
            action=env.get("GITHUB_ACTION", ""),
            actor=env.get("GITHUB_ACTOR", ""),
            job=env.get("GITHUB_JOB", ""),
            run_number=_env_int(env, "GITHUB_RUN_NUMBER"),
            run_id=_env_int(env, "GITHUB_RUN_ID"),
            run_attempt=_env_int(env, "GITHUB_RUN_ATTEMPT"),
            repository=env.get("GITHUB_REPOSITORY", ""),
            api_url=env.get("GITHUB_API_URL") or config.DEFAULT_API_URL,
            server_url=env.get("GITHUB_SERVER_URL") or config.DEFAULT_SERVER_URL,
            graphql_url=env.get("GITHUB_GRAPHQL_URL") or config.DEFAULT_GRAPHQL_URL,
            event_path=event_path,
            payload=payload,
        )

    @property
    def repo(self) -> str:
        """Repository in "owner/name" form, from the environment or payload."""
        if self.repository:
            return self.repository
        repository = self.payload.get("repository") or {}
        return repository.get("full_name", "")


def _env_int(env: Mapping[str, str], name: str) -> int:
    try:
        return int(env.get(name, "") or 0)
    except ValueError:
        return 0
