"""CLI commands and entry point."""

import json
import subprocess
import sys

import click

from .config import DEFAULT_API_URL, DEFAULT_REMOTE, __version__
from .engine import plan, run
from .errors import RewriteError
from .git import collect_changeset, get_repo_root, resolve_branch, resolve_repo, sync_local_branch
from .ui import echo_outcome, format_plan, outcome_dict
from .validation import validate_author, validate_message, validate_rewrite_id


def _fail(exc):
    click.secho(f"error ({exc.kind}): {exc}", fg="red", err=True)
    sys.exit(exc.exit_code)


@click.group()
@click.version_option(version=__version__)
def cli():
    """Commit-rewrite: publish changes as a new or pseudo-amended commit."""
    pass


@cli.command()
@click.option("-m", "--message", required=True, help="Commit message (may span lines)")
@click.option(
    "--rewrite-id",
    required=True,
    envvar="COMMIT_REWRITE_ID",
    help="Identity of the task; a tip carrying the same id is amended instead of appended to",
)
@click.option("-b", "--branch", default=None, help="Target branch (default: current branch)")
@click.option("-r", "--repo", default=None, help="owner/name (default: from the remote URL)")
@click.option("--remote", default=DEFAULT_REMOTE, show_default=True, help="Remote used for detection and sync")
@click.option("--api-url", envvar="GITHUB_API_URL", default=DEFAULT_API_URL, show_default=True)
@click.option("--author-name", default=None, help="Author name (default: the token's identity)")
@click.option("--author-email", default=None, help="Author email (default: the token's identity)")
@click.option("--dry-run", is_flag=True, help="Show the decision and changeset without writing anything")
@click.option("--no-sync", is_flag=True, help="Leave the local checkout untouched")
@click.option("--json", "as_json", is_flag=True, help="Print the outcome as JSON")
@click.argument("files", nargs=-1)
def commit(message, rewrite_id, branch, repo, remote, api_url, author_name, author_email,
           dry_run, no_sync, as_json, files):
    """Commit working-tree changes, amending the tip if it belongs to the same task.

    FILES are path patterns relative to the repository root; by default every
    modified, added or deleted path is included.
    """
    import commit_rewrite as cr

    try:
        validate_message(message)
        validate_rewrite_id(rewrite_id)
        author = validate_author(author_name, author_email)
        root = get_repo_root()
        branch = resolve_branch(branch, root)
        repo = resolve_repo(repo, remote, root)
        changes = collect_changeset(root, list(files) or None)
        store = cr.get_object_store(repo, api_url=api_url)

        if dry_run:
            p = plan(store, branch, rewrite_id)
            click.secho("Dry run: planned commit", fg="yellow")
            click.echo(format_plan(p, branch, changes))
            return

        outcome = run(store, branch, rewrite_id, message, changes, author=author)
    except RewriteError as exc:
        _fail(exc)

    if as_json:
        click.echo(json.dumps(outcome_dict(outcome), indent=2))
    else:
        echo_outcome(outcome)

    if outcome.commit and not no_sync:
        try:
            sync_local_branch(branch, outcome.commit, outcome.previous_tip, remote=remote, root=root)
        except subprocess.CalledProcessError as exc:
            decoded = exc.output.decode("utf-8", errors="ignore") if isinstance(exc.output, (bytes, bytearray)) else str(exc.output or "")
            click.secho(
                f"Remote branch updated, but syncing the local checkout failed: {decoded.strip()}",
                fg="yellow",
                err=True,
            )


@cli.command()
@click.option("--rewrite-id", required=True, envvar="COMMIT_REWRITE_ID")
@click.option("-b", "--branch", default=None, help="Target branch (default: current branch)")
@click.option("-r", "--repo", default=None, help="owner/name (default: from the remote URL)")
@click.option("--remote", default=DEFAULT_REMOTE, show_default=True)
@click.option("--api-url", envvar="GITHUB_API_URL", default=DEFAULT_API_URL, show_default=True)
def inspect(rewrite_id, branch, repo, remote, api_url):
    """Show the branch tip and whether a run would amend or append."""
    import commit_rewrite as cr

    try:
        branch = resolve_branch(branch)
        repo = resolve_repo(repo, remote)
        store = cr.get_object_store(repo, api_url=api_url)
        p = plan(store, branch, rewrite_id)
    except RewriteError as exc:
        _fail(exc)

    click.secho(f"Repository: {repo}", fg="cyan")
    click.echo(format_plan(p, branch))


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
