"""Commit creation and compare-and-swap branch updates."""

from .errors import Conflict


def create_commit(store, parent, tree, message, author=None):
    """
    Create a commit object without touching any ref.

    Args:
        store: Remote object store
        parent: Parent commit id (None for a root commit)
        tree: Tree id of the snapshot
        message: Full commit message, trailer included
        author: Optional {"name", "email"}; defaults to the credential's identity

    Returns:
        The new commit id
    """
    parents = [parent] if parent else []
    return store.create_commit(parents, tree, message, author=author)


def update_ref(store, branch, expected_old, new):
    """
    Move `branch` from `expected_old` to `new`.

    Raises Conflict if the branch no longer points at `expected_old`,
    RemoteNotFound if it does not exist and Forbidden if the credential may
    not write to it.
    """
    try:
        store.update_ref(branch, expected_old, new)
    except Conflict as exc:
        moved_to = exc.actual[:10] if exc.actual else "another commit"
        raise Conflict(
            f"Branch '{branch}' moved from {expected_old[:10]} to {moved_to} "
            "while this run was in progress; someone else pushed. Re-run to build on the new tip.",
            branch=branch,
            expected=expected_old,
            actual=exc.actual,
        ) from exc
    return new
