"""Value types for commits, trees and changesets."""

import hashlib
from collections import namedtuple

from .config import MODE_EXECUTABLE, MODE_FILE, MODE_SYMLINK, MODE_TREE

Commit = namedtuple("Commit", ["sha", "tree", "parents", "message"])

TreeEntry = namedtuple("TreeEntry", ["name", "mode", "type", "sha"])

# content is None for a deletion
Change = namedtuple("Change", ["path", "content", "mode"])

BLOB_MODES = (MODE_FILE, MODE_EXECUTABLE, MODE_SYMLINK)


def write(path, content, mode=MODE_FILE):
    """Build a Change that sets `path` to `content`."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return Change(path=path, content=content, mode=mode)


def delete(path):
    """Build a Change that removes `path`."""
    return Change(path=path, content=None, mode=None)


def is_deletion(change):
    return change.content is None


def blob_sha(content):
    """Return the git object id of a blob holding `content`."""
    header = f"blob {len(content)}\0".encode()
    return hashlib.sha1(header + content).hexdigest()


def tree_entry_for(name, sha, mode):
    type_ = "tree" if mode == MODE_TREE else "blob"
    return TreeEntry(name=name, mode=mode, type=type_, sha=sha)
