"""
Central configuration for the metadata action context scripts.
"""

# Action inputs
INPUT_CONTEXT = "context"
INPUT_IMAGES = "images"
INPUT_TAGS = "tags"
INPUT_FLAVOR = "flavor"
INPUT_LABELS = "labels"
INPUT_ANNOTATIONS = "annotations"
INPUT_SEP_TAGS = "sep-tags"
INPUT_SEP_LABELS = "sep-labels"
INPUT_SEP_ANNOTATIONS = "sep-annotations"
INPUT_BAKE_TARGET = "bake-target"
INPUT_GITHUB_TOKEN = "github-token"

# Input defaults
DEFAULT_SEPARATOR = "\n"
DEFAULT_BAKE_TARGET = "docker-metadata-action"
LIST_COMMENT_MARKER = "#"

# Context sources
CONTEXT_WORKFLOW = "workflow"
CONTEXT_GIT = "git"

# Environment variables
ENV_INPUT_PREFIX = "INPUT_"
ENV_PR_HEAD_SHA = "DOCKER_METADATA_PR_HEAD_SHA"
ENV_EVENT_PATH = "GITHUB_EVENT_PATH"
ENV_OUTPUT = "GITHUB_OUTPUT"

# Event name patterns (matched with re.search)
PULL_REQUEST_EVENT_PATTERN = r"pull_request"
PULL_REQUEST_TARGET_EVENT_PATTERN = r"pull_request_target"
PUSH_EVENT_NAMES = ("push",)

# Ref formats
PULL_REQUEST_MERGE_REF = "refs/pull/{number}/merge"
TAG_REF_PREFIX = "refs/tags/"
BRANCH_REF_PREFIX = "refs/heads/"

# GitHub defaults
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SERVER_URL = "https://github.com"
DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
