"""Display helpers for plans and outcomes."""

import click

from .engine import APPEND, NO_OP, REWRITE
from .objects import is_deletion


def short(sha):
    return sha[:10] if sha else "-"


def format_changeset(changes):
    """Format changeset entries as a status-like listing."""
    if not changes:
        return "  (no changes)"
    lines = []
    for change in changes:
        action = "deleted" if is_deletion(change) else f"write {change.mode}"
        lines.append(f"  {action:>14}: {change.path}")
    return "\n".join(lines)


def format_plan(plan, branch, changes=None):
    """Describe what a run would do to `branch`."""
    lines = [
        f"Branch:     {branch}",
        f"Tip:        {short(plan.tip)}",
        f"Tip id:     {plan.tip_rewrite_id or '(none)'}",
        f"Decision:   {plan.action}",
        f"Parent:     {short(plan.parent)}",
        f"Base tree:  {short(plan.base_tree)}",
    ]
    if changes is not None:
        lines.append("Changes:")
        lines.append(format_changeset(changes))
    return "\n".join(lines)


def echo_outcome(outcome):
    """Print a one-line summary of a finished run."""
    if outcome.action == NO_OP:
        click.secho(
            f"Nothing to commit: tree of {outcome.branch} is unchanged at {short(outcome.previous_tip)}",
            fg="yellow",
        )
        return
    verb = {REWRITE: "Amended", APPEND: "Committed"}[outcome.action]
    click.secho(
        f"✔ {verb} {outcome.branch}: {short(outcome.previous_tip)} -> {short(outcome.commit)}"
        f" (parent {short(outcome.parent)})",
        fg="green",
        bold=True,
    )


def outcome_dict(outcome):
    return {
        "outcome": outcome.action,
        "branch": outcome.branch,
        "previous_tip": outcome.previous_tip,
        "commit": outcome.commit,
        "parent": outcome.parent,
        "tree": outcome.tree,
    }
