#!/usr/bin/env python3
"""
Script to resolve the build context for the metadata action.

Reads the action inputs, resolves the build context from the selected source
(workflow event or local git checkout) and emits both as one JSON object
that the tag, label and annotation generation steps consume.

Usage:
    python metadata_context.py --output-file context.json
"""

import argparse
import json
import logging
import os
import sys
import uuid

import yaml

# Ensure we can import from local modules
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(os.path.dirname(current_dir))
sys.path.insert(0, parent_dir)

from metadata_action.scripts import config
from metadata_action.scripts.context_resolver import get_context
from metadata_action.scripts.errors import ContextError
from metadata_action.scripts.git_operations import GitOperationsError
from metadata_action.scripts.github_client import GitHubClientError
from metadata_action.scripts.inputs import read_inputs


def render(data, fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2)


def write_github_output(path: str, name: str, value: str) -> None:
    """Append a multiline step output using a random heredoc delimiter."""
    delimiter = f"EOF-{uuid.uuid4()}"
    with open(path, "a") as f:
        f.write(f"{name}<<{delimiter}\n")
        f.write(value)
        f.write(f"\n{delimiter}\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Resolve metadata action build context")
    parser.add_argument("--output-file", help="Path to write output to", default=None)
    parser.add_argument("--format", choices=["json", "yaml"], default="json", help="Output format")
    parser.add_argument("--work-dir", help="Checkout used by the git context source", default=None)
    parser.add_argument("--include-payload", action="store_true", help="Include the raw event payload")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    inputs = read_inputs()
    print(f"Resolving context from source: {inputs.context}", file=sys.stderr)

    try:
        context = get_context(
            inputs.context,
            work_dir=args.work_dir,
            github_token=inputs.github_token,
        )
    except (ContextError, GitOperationsError, GitHubClientError) as e:
        print(f"::error::{e}", file=sys.stderr)
        return 1

    result = {
        "inputs": inputs.to_dict(),
        "context": context.to_dict(include_payload=args.include_payload),
    }
    output = render(result, args.format)

    if args.output_file:
        with open(args.output_file, "w") as f:
            f.write(output)
    else:
        print(output)

    gh_output = os.environ.get(config.ENV_OUTPUT)
    if gh_output:
        # JSON regardless of --format, for fromJson() in later jobs
        write_github_output(gh_output, "context", json.dumps(result["context"]))

    return 0


if __name__ == "__main__":
    sys.exit(main())
