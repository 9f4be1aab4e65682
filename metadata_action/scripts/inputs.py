"""
Action input reader for the metadata action.

Reads the raw `INPUT_*` variables the Actions runner exports for each
`with:` entry and normalizes them into the Inputs record consumed by the
context resolver and the downstream tag/label generation.
"""

import csv
import io
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from . import config


class InputError(Exception):
    """Raised when a required action input is not supplied."""
    pass


@dataclass(frozen=True)
class Inputs:
    """Normalized action inputs for one invocation."""
    context: str = config.CONTEXT_WORKFLOW
    images: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    flavor: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    annotations: List[str] = field(default_factory=list)
    sep_tags: str = config.DEFAULT_SEPARATOR
    sep_labels: str = config.DEFAULT_SEPARATOR
    sep_annotations: str = config.DEFAULT_SEPARATOR
    bake_target: str = config.DEFAULT_BAKE_TARGET
    github_token: str = ""

    def to_dict(self, redact_token: bool = True) -> Dict[str, object]:
        """
        Convert to a JSON-ready dict.

        Args:
            redact_token: Replace a non-empty github_token with "***"
        """
        token = self.github_token
        if redact_token and token:
            token = "***"
        return {
            "context": self.context,
            "images": list(self.images),
            "tags": list(self.tags),
            "flavor": list(self.flavor),
            "labels": list(self.labels),
            "annotations": list(self.annotations),
            "sep_tags": self.sep_tags,
            "sep_labels": self.sep_labels,
            "sep_annotations": self.sep_annotations,
            "bake_target": self.bake_target,
            "github_token": token,
        }


def _input_env_name(name: str) -> str:
    return config.ENV_INPUT_PREFIX + name.replace(" ", "_").upper()


def get_input(
    name: str,
    required: bool = False,
    trim_whitespace: bool = True,
    env: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Read a single action input.

    Args:
        name: Input name as declared in action.yml (e.g. "sep-tags")
        required: Raise InputError when the input is empty
        trim_whitespace: Strip leading/trailing whitespace from the value
        env: Environment mapping (defaults to os.environ)

    Returns:
        Input value, or "" when not supplied

    Raises:
        InputError: If required and not supplied
    """
    env = os.environ if env is None else env
    value = env.get(_input_env_name(name), "")
    if required and not value:
        raise InputError(f"Input required and not supplied: {name}")
    if trim_whitespace:
        return value.strip()
    return value


def parse_list(
    text: str,
    ignore_comma: bool = False,
    comment: Optional[str] = None,
) -> List[str]:
    """
    Split delimited input text into trimmed tokens.

    Newlines always separate records. With ignore_comma each line is one
    token, kept verbatim apart from its ends. Otherwise commas separate
    tokens and double quotes protect commas. Lines starting with the comment
    marker are dropped, as are empty tokens.

    Args:
        text: Raw input text
        ignore_comma: Keep each line as a single token
        comment: Comment marker (e.g. "#"), or None to keep every line

    Returns:
        List of tokens in input order
    """
    if not text:
        return []

    lines = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if comment and stripped.startswith(comment):
            continue
        lines.append(line)

    if ignore_comma:
        return [line.strip() for line in lines]

    tokens: List[str] = []
    for record in csv.reader(io.StringIO("\n".join(lines))):
        tokens.extend(record)

    return [t.strip() for t in tokens if t.strip()]


def get_input_list(
    name: str,
    ignore_comma: bool = False,
    comment: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """Read a list-valued action input. See parse_list for the format."""
    return parse_list(
        get_input(name, env=env),
        ignore_comma=ignore_comma,
        comment=comment,
    )


def read_inputs(env: Optional[Mapping[str, str]] = None) -> Inputs:
    """
    Read every metadata action input into an Inputs record.

    Never fails: absent values resolve to their defaults or empty lists.
    Separators keep their whitespace since a separator may itself be
    whitespace.
    """
    def list_input(name: str) -> List[str]:
        return get_input_list(
            name,
            ignore_comma=True,
            comment=config.LIST_COMMENT_MARKER,
            env=env,
        )

    def separator(name: str) -> str:
        return get_input(name, trim_whitespace=False, env=env) or config.DEFAULT_SEPARATOR

    return Inputs(
        context=get_input(config.INPUT_CONTEXT, env=env) or config.CONTEXT_WORKFLOW,
        images=list_input(config.INPUT_IMAGES),
        tags=list_input(config.INPUT_TAGS),
        flavor=list_input(config.INPUT_FLAVOR),
        labels=list_input(config.INPUT_LABELS),
        annotations=list_input(config.INPUT_ANNOTATIONS),
        sep_tags=separator(config.INPUT_SEP_TAGS),
        sep_labels=separator(config.INPUT_SEP_LABELS),
        sep_annotations=separator(config.INPUT_SEP_ANNOTATIONS),
        bake_target=get_input(config.INPUT_BAKE_TARGET, env=env) or config.DEFAULT_BAKE_TARGET,
        github_token=get_input(config.INPUT_GITHUB_TOKEN, env=env),
    )
