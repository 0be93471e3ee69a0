"""Bring the local checkout in line with a branch updated remotely."""

import subprocess

from ..config import DEFAULT_REMOTE
from .core import get_current_branch, get_head_sha, git


def _local_branch_exists(root, branch):
    try:
        git(root, "rev-parse", "--verify", "--quiet", f"refs/heads/{branch}")
    except subprocess.CalledProcessError:
        return False
    return True


def sync_local_branch(branch, commit, previous_tip=None, remote=DEFAULT_REMOTE, root=None):
    """
    Fetch `commit` and point the local branch at it.

    When the branch (or a detached HEAD at the previous tip) is checked out, a
    mixed reset moves HEAD and the index but leaves the working tree alone, so
    changes outside the published changeset stay modified.

    Returns:
        "reset", "updated" or "fetched", describing what was moved
    """
    git(root, "fetch", "--no-tags", "--quiet", remote,
        f"+refs/heads/{branch}:refs/remotes/{remote}/{branch}")

    current = get_current_branch(root)
    if current == branch or (current is None and previous_tip and get_head_sha(root) == previous_tip):
        git(root, "reset", "--mixed", "--quiet", commit)
        return "reset"
    if _local_branch_exists(root, branch):
        git(root, "update-ref", f"refs/heads/{branch}", commit)
        return "updated"
    return "fetched"
