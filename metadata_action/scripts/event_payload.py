"""
Event payload views for commit timestamp lookup.

Each GitHub event kind carries (or does not carry) the commit timestamp at a
different place in its payload. payload_for() picks the view matching the
event name; every view answers commit_timestamp() with the raw ISO 8601
string, or None when the payload has no timestamp for the commit.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from . import config


class EventPayload:
    """Payload of an event kind with no special timestamp rule."""

    kind = "other"

    def __init__(self, event_name: str, payload: Dict[str, Any]):
        self.event_name = event_name
        self.payload = payload if isinstance(payload, dict) else {}

    @property
    def commits(self) -> List[Dict[str, Any]]:
        commits = self.payload.get("commits")
        if not isinstance(commits, list):
            return []
        return [c for c in commits if isinstance(c, dict)]

    @property
    def head_commit(self) -> Dict[str, Any]:
        head_commit = self.payload.get("head_commit")
        return head_commit if isinstance(head_commit, dict) else {}

    def commit_timestamp(self) -> Optional[str]:
        """First commit's timestamp, falling back to head_commit."""
        if self.commits:
            timestamp = self.commits[0].get("timestamp")
            if timestamp:
                return timestamp
        return self.head_commit.get("timestamp") or None


class PushEventPayload(EventPayload):
    """Push events list the pushed commits; tag pushes only carry head_commit."""

    kind = "push"


class PullRequestEventPayload(EventPayload):
    """Pull request events; most carry no commit list, only the PR itself."""

    kind = "pull_request"

    @property
    def number(self) -> Optional[int]:
        number = self.payload.get("number")
        if number is None:
            number = (self.payload.get("pull_request") or {}).get("number")
        return number

    @property
    def head_sha(self) -> Optional[str]:
        pull_request = self.payload.get("pull_request") or {}
        head = pull_request.get("head") or {}
        return head.get("sha")


def is_pull_request_event(event_name: str) -> bool:
    """True for pull_request, pull_request_target and the review events."""
    return re.search(config.PULL_REQUEST_EVENT_PATTERN, event_name or "") is not None


def is_pull_request_target_event(event_name: str) -> bool:
    return re.search(config.PULL_REQUEST_TARGET_EVENT_PATTERN, event_name or "") is not None


def payload_for(event_name: str, payload: Dict[str, Any]) -> EventPayload:
    """
    Select the payload view for an event.

    Args:
        event_name: GITHUB_EVENT_NAME of the run
        payload: Parsed event payload

    Returns:
        PushEventPayload, PullRequestEventPayload or EventPayload
    """
    if event_name in config.PUSH_EVENT_NAMES:
        return PushEventPayload(event_name, payload)
    if is_pull_request_event(event_name):
        return PullRequestEventPayload(event_name, payload)
    return EventPayload(event_name, payload)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp as found in GitHub payloads and API responses.

    The result is always timezone-aware; offset-less values are rejected.

    Raises:
        ValueError: If value is not an ISO 8601 timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no UTC offset")
    return parsed
