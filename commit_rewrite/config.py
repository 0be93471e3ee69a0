"""Configuration constants and settings for commit-rewrite."""

import re

__version__ = "0.1.0"

TRAILER_KEY = "X-Commit-Rewrite-ID"

TRAILER_LINE_RE = re.compile(r"^(?P<key>[A-Za-z0-9][A-Za-z0-9-]*):[ \t]+(?P<value>\S.*?)\s*$")

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REMOTE = "origin"

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")
BRANCH_ENV_VARS = ("GITHUB_HEAD_REF", "GITHUB_REF_NAME")
REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"

# GitHub rejects blobs above 100 MiB.
MAX_BLOB_SIZE = 100 * 1024 * 1024

MODE_FILE = "100644"
MODE_EXECUTABLE = "100755"
MODE_SYMLINK = "120000"
MODE_TREE = "040000"

HTTP_CONNECT_TIMEOUT = 10.0
HTTP_READ_TIMEOUT = 60.0
HTTP_GET_RETRIES = 3

# Object id of the tree with no entries; exists implicitly in every repository.
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
