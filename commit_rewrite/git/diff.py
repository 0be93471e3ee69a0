"""Changed-path detection and changeset collection from the working tree."""

import fnmatch
import os
import stat

import click

from ..config import MODE_EXECUTABLE, MODE_FILE, MODE_SYMLINK
from ..objects import delete, write
from ..validation import validate_pattern
from .core import git


def get_changed_paths(root=None):
    """
    Get modified, added, deleted and untracked paths relative to the repo root.

    Renames contribute both the new path and the removed old path.
    """
    out = git(root, "status", "--porcelain=v1", "-z", "--untracked-files=all", strip=False)
    records = out.split("\0")
    paths = []
    i = 0
    while i < len(records):
        record = records[i]
        i += 1
        if len(record) < 4 or record.startswith("!!"):
            continue
        xy, path = record[:2], record[3:]
        paths.append(path)
        if "R" in xy or "C" in xy:
            source = records[i]
            i += 1
            if "R" in xy:
                paths.append(source)

    seen = set()
    return [p for p in paths if not (p in seen or seen.add(p))]


def get_repo_files(root=None):
    """Tracked plus untracked (non-ignored) files."""
    out = git(root, "ls-files", "-z", "--cached", "--others", "--exclude-standard", strip=False)
    return [p for p in out.split("\0") if p]


def matches(pattern, path):
    """A pattern matches a path by glob, exactly, or as a directory prefix; "." matches everything."""
    pattern = pattern.rstrip("/")
    return (
        pattern == "."
        or path == pattern
        or path.startswith(pattern + "/")
        or fnmatch.fnmatchcase(path, pattern)
    )


def select_paths(patterns, changed, candidates):
    """
    Select the paths the caller asked for, in pattern order.

    Changed paths are always eligible (this is how deletions get selected);
    other repository files are eligible when a pattern names them.
    """
    changed_set = set(changed)
    pool = list(changed) + [p for p in candidates if p not in changed_set]
    selected = []
    for pattern in patterns:
        normalized = validate_pattern(pattern)
        hits = sorted(p for p in pool if matches(normalized, p) and p not in selected)
        if not hits:
            click.secho(f"No files match pattern: {pattern}", fg="yellow", err=True)
        selected.extend(hits)
    return selected


def read_change(root, path):
    """Read a working-tree path as a Change; missing paths become deletions."""
    full = os.path.join(root, path)
    try:
        st = os.lstat(full)
    except (FileNotFoundError, NotADirectoryError):
        # gone, or a parent directory was replaced by a file
        return delete(path)

    if stat.S_ISLNK(st.st_mode):
        return write(path, os.fsencode(os.readlink(full)), MODE_SYMLINK)
    if not stat.S_ISREG(st.st_mode):
        return None
    mode = MODE_EXECUTABLE if st.st_mode & stat.S_IXUSR else MODE_FILE
    with open(full, "rb") as f:
        return write(path, f.read(), mode)


def collect_changeset(root, patterns=None):
    """
    Build the changeset for a run.

    Args:
        root: Repository top-level directory
        patterns: Optional path patterns; defaults to every changed path

    Returns:
        List of Change entries ordered as selected
    """
    changed = get_changed_paths(root)
    if patterns:
        paths = select_paths(patterns, changed, get_repo_files(root))
    else:
        paths = sorted(changed)

    changes = []
    for path in paths:
        change = read_change(root, path)
        if change is None:
            click.secho(f"Skipping {path}: not a regular file or symlink", fg="yellow", err=True)
            continue
        changes.append(change)
    return changes
