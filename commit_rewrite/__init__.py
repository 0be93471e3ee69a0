"""Commit-rewrite: publish changes as a new or pseudo-amended commit via the GitHub API."""

# Re-export the public API for library-style usage (and tests).
from .cli import cli, main
from .config import TRAILER_KEY, __version__
from .engine import APPEND, NO_OP, REWRITE, Outcome, Plan, decide, plan, run
from .errors import (  # noqa: F401
    Conflict,
    ContentTooLarge,
    Forbidden,
    InvalidInput,
    InvalidPath,
    RemoteNotFound,
    RewriteError,
    Transient,
)
from .git import (  # noqa: F401
    collect_changeset,
    get_changed_paths,
    get_current_branch,
    get_origin_repo_slug,
    get_repo_root,
    resolve_branch,
    resolve_repo,
    sync_local_branch,
)
from .github import GitHubClient, GitHubObjectStore, get_github_client, get_object_store  # noqa: F401
from .graph import build_tree, trees_equal
from .objects import Change, Commit, TreeEntry, blob_sha, delete, write  # noqa: F401
from .trailer import decode, encode, parse_trailers
from .updater import create_commit, update_ref
from .validation import validate_changeset, validate_path, validate_pattern, validate_rewrite_id  # noqa: F401

__all__ = [
    "__version__",
    "TRAILER_KEY",
    # CLI
    "cli",
    "main",
    # Trailer codec
    "encode",
    "decode",
    "parse_trailers",
    # Object graph
    "Change",
    "Commit",
    "TreeEntry",
    "write",
    "delete",
    "blob_sha",
    "build_tree",
    "trees_equal",
    # Decision engine
    "REWRITE",
    "APPEND",
    "NO_OP",
    "Plan",
    "Outcome",
    "decide",
    "plan",
    "run",
    # Commit & ref updates
    "create_commit",
    "update_ref",
    # Remote store
    "GitHubClient",
    "GitHubObjectStore",
    "get_github_client",
    "get_object_store",
    # Local git
    "get_repo_root",
    "get_current_branch",
    "get_origin_repo_slug",
    "get_changed_paths",
    "resolve_branch",
    "resolve_repo",
    "collect_changeset",
    "sync_local_branch",
    # Validation
    "validate_rewrite_id",
    "validate_path",
    "validate_pattern",
    "validate_changeset",
    # Errors
    "RewriteError",
    "InvalidInput",
    "InvalidPath",
    "ContentTooLarge",
    "RemoteNotFound",
    "Forbidden",
    "Conflict",
    "Transient",
]
