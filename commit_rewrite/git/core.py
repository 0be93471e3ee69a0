"""Core git utilities and subprocess wrappers."""

import os
import shlex
import subprocess
from urllib.parse import urlparse

from ..config import BRANCH_ENV_VARS, DEFAULT_REMOTE, REPOSITORY_ENV_VAR
from ..errors import InvalidInput


def run(cmd, strip=True):
    """
    Run a command and return its decoded output.

    Accepts either a string (split using shlex) or an argv list. We avoid invoking
    a shell so file paths containing characters like '(' and ')' are handled
    safely. Pass strip=False where leading whitespace or NULs are significant.
    """
    args = cmd if isinstance(cmd, (list, tuple)) else shlex.split(cmd)
    out = subprocess.check_output(args, stderr=subprocess.STDOUT).decode("utf-8", errors="ignore")
    return out.strip() if strip else out


def git(root, *args, **kwargs):
    """Run a git subcommand in `root` (the current directory when None)."""
    prefix = ["git", "-C", str(root)] if root else ["git"]
    return run([*prefix, *args], **kwargs)


def get_repo_root(path=None):
    """Return the top-level directory of the working tree."""
    try:
        return git(path, "rev-parse", "--show-toplevel")
    except subprocess.CalledProcessError as exc:
        raise InvalidInput("Not inside a git working tree") from exc


def get_current_branch(root=None):
    """Get the checked-out branch name, or None when HEAD is detached."""
    try:
        out = subprocess.check_output(
            ["git", "-C", str(root or "."), "symbolic-ref", "--quiet", "--short", "HEAD"],
            stderr=subprocess.DEVNULL,
        )
    except subprocess.CalledProcessError:
        return None
    return out.decode("utf-8", errors="ignore").strip() or None


def get_head_sha(root=None):
    try:
        return git(root, "rev-parse", "--verify", "--quiet", "HEAD")
    except subprocess.CalledProcessError:
        return None


def resolve_branch(branch=None, root=None):
    """
    Resolve the target branch once for a run.

    Uses the explicit name if given, otherwise the checked-out branch, and for
    detached checkouts the CI branch variables.
    """
    if branch:
        return branch
    current = get_current_branch(root)
    if current:
        return current
    for var in BRANCH_ENV_VARS:
        value = os.environ.get(var)
        if value:
            return value
    raise InvalidInput("Could not detect the current branch; pass --branch")


def slug_from_url(url):
    """Extract owner/repo from a remote URL."""
    if url.startswith("git@"):
        _, path = url.split(":", 1)
    elif url.startswith(("https://", "http://", "ssh://")):
        path = (urlparse(url).path or "").strip("/")
        path = "/".join(path.split("/")[-2:])
    else:
        path = url

    if path.endswith(".git"):
        path = path[:-4]

    if path.count("/") != 1:
        raise InvalidInput(f"Could not determine repo slug from URL: {url}")

    return path


def get_origin_repo_slug(remote=DEFAULT_REMOTE, root=None):
    """Extract the owner/repo slug from a remote URL."""
    url = git(root, "config", "--get", f"remote.{remote}.url")
    return slug_from_url(url)


def resolve_repo(repo=None, remote=DEFAULT_REMOTE, root=None):
    """Use an explicit slug, the remote's URL, or GITHUB_REPOSITORY, in that order."""
    if repo:
        return repo
    try:
        return get_origin_repo_slug(remote, root)
    except subprocess.CalledProcessError:
        pass
    value = os.environ.get(REPOSITORY_ENV_VAR)
    if value:
        return value
    raise InvalidInput(f"Could not determine the repository from remote '{remote}'; pass --repo")
