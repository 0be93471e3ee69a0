"""
Tree construction from a base tree plus a changeset.

Only subtrees containing a changed path are rebuilt; every other entry keeps
its existing object id, so untouched content is never re-uploaded. Entries are
written in sorted order, which together with content addressing makes the
result deterministic for a given base and changeset.
"""

from .config import MODE_TREE
from .objects import TreeEntry, blob_sha, is_deletion, tree_entry_for
from .validation import validate_changeset


def _path_trie(changes):
    """Nest changes by path segment: {name: Change | {name: ...}}."""
    root = {}
    for change in changes:
        *dirs, name = change.path.split("/")
        node = root
        for dirname in dirs:
            child = node.get(dirname)
            if child is not None and not isinstance(child, dict) and not is_deletion(child):
                # a directory replaced by a written file; its old contents go with it
                node = None
                break
            if not isinstance(child, dict):
                # a deleted file being replaced by a directory
                child = node[dirname] = {}
            node = child
        if node is None:
            continue
        if is_deletion(change) and isinstance(node.get(name), dict):
            # deleting a path that the changeset also writes beneath
            continue
        # a write replaces any pending deletions beneath the same name
        node[name] = change
    return root


def _write_blob(store, name, change, existing):
    sha = blob_sha(change.content)
    if existing is None or existing.type != "blob" or existing.sha != sha:
        sha = store.create_blob(change.content)
    return TreeEntry(name, change.mode, "blob", sha)


def _rebuild(store, tree_sha, node):
    """
    Return the id of `tree_sha` with `node` applied, or None if it ends up empty.
    """
    original = {}
    if tree_sha:
        original = {entry.name: entry for entry in store.get_tree(tree_sha)}
    entries = dict(original)

    for name in sorted(node):
        child = node[name]
        existing = entries.get(name)
        if isinstance(child, dict):
            subtree = existing.sha if existing is not None and existing.type == "tree" else None
            new_sha = _rebuild(store, subtree, child)
            if new_sha is None:
                entries.pop(name, None)
            else:
                entries[name] = tree_entry_for(name, new_sha, MODE_TREE)
        elif is_deletion(child):
            entries.pop(name, None)
        else:
            entries[name] = _write_blob(store, name, child, existing)

    if not entries:
        return None
    if tree_sha and entries == original:
        return tree_sha
    return store.create_tree([entries[name] for name in sorted(entries)])


def build_tree(store, base_tree, changes):
    """
    Apply a changeset to a base tree and return the resulting tree id.

    Args:
        store: Remote object store
        base_tree: Id of the tree to start from (None for an empty tree)
        changes: Iterable of Change entries; a None content deletes the path

    Returns:
        Id of the new tree. Equals `base_tree` when nothing changed.

    Raises InvalidPath or ContentTooLarge before any object is created when an
    entry is rejected.
    """
    changes = validate_changeset(list(changes))
    new_tree = _rebuild(store, base_tree, _path_trie(changes))
    if new_tree is None:
        return store.create_tree([])
    return new_tree


def trees_equal(a, b):
    """Tree ids are content addresses, so equal ids mean equal snapshots."""
    return a is not None and a == b
