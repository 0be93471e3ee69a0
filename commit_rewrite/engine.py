"""
Decide whether a run rewrites the branch tip or appends to it, then publish.

A run moves through FETCH_TIP -> {REWRITE, APPEND} -> BUILD_TREE ->
{NO_OP, COMMIT}. The branch is only touched by the final compare-and-swap, so
a failed or aborted run leaves it as it was.
"""

from collections import namedtuple

from . import trailer, updater
from .graph import build_tree, trees_equal
from .validation import validate_message, validate_rewrite_id

REWRITE = "rewrite"
APPEND = "append"
NO_OP = "no-op"

Plan = namedtuple("Plan", ["action", "tip", "parent", "base_tree", "tip_rewrite_id"])

Outcome = namedtuple(
    "Outcome", ["action", "branch", "previous_tip", "commit", "parent", "tree"]
)


def decide(tip, rewrite_id):
    """
    Pick REWRITE or APPEND for a tip commit.

    The tip is rewritten only when its trailer carries `rewrite_id` and it has
    exactly one parent; root and merge commits are always appended to.
    """
    tip_id = trailer.decode(tip.message)
    if tip_id == rewrite_id and len(tip.parents) == 1:
        return Plan(REWRITE, tip.sha, tip.parents[0], tip.tree, tip_id)
    return Plan(APPEND, tip.sha, tip.sha, tip.tree, tip_id)


def plan(store, branch, rewrite_id):
    """Fetch the branch tip and decide what a run would do."""
    validate_rewrite_id(rewrite_id)
    tip_sha = store.get_branch_tip(branch)
    return decide(store.get_commit(tip_sha), rewrite_id)


def run(store, branch, rewrite_id, message, changes, author=None):
    """
    Publish `changes` to `branch` as a new or pseudo-amended commit.

    Args:
        store: Remote object store
        branch: Target branch name, already resolved
        rewrite_id: Rewrite-group id of the calling task
        message: Commit message without the rewrite trailer
        changes: Changeset entries
        author: Optional {"name", "email"}

    Returns:
        Outcome; `commit` is None for a no-op.
    """
    validate_message(message)
    p = plan(store, branch, rewrite_id)

    new_tree = build_tree(store, p.base_tree, changes)
    if trees_equal(new_tree, p.base_tree):
        return Outcome(NO_OP, branch, p.tip, None, None, new_tree)

    full_message = trailer.encode(rewrite_id, message)
    commit = updater.create_commit(store, p.parent, new_tree, full_message, author=author)
    updater.update_ref(store, branch, p.tip, commit)
    return Outcome(p.action, branch, p.tip, commit, p.parent, new_tree)
