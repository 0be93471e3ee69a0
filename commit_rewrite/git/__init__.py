"""Local git utilities package."""

from .core import (
    get_current_branch,
    get_origin_repo_slug,
    get_repo_root,
    resolve_branch,
    resolve_repo,
    run,
    slug_from_url,
)
from .diff import (
    collect_changeset,
    get_changed_paths,
    get_repo_files,
    read_change,
    select_paths,
)
from .sync import sync_local_branch

__all__ = [
    "run",
    "get_repo_root",
    "get_current_branch",
    "get_origin_repo_slug",
    "slug_from_url",
    "resolve_branch",
    "resolve_repo",
    "get_changed_paths",
    "get_repo_files",
    "select_paths",
    "read_change",
    "collect_changeset",
    "sync_local_branch",
]
