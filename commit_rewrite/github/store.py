"""Git object store backed by the GitHub REST git database endpoints."""

import base64
from urllib.parse import quote

from ..config import EMPTY_TREE_SHA
from ..errors import Conflict, ContentTooLarge, Forbidden, InvalidInput, RemoteNotFound
from ..objects import Commit, TreeEntry
from .client import error_message, raise_for_status


class GitHubObjectStore:
    """
    Read and create commits, trees and blobs in one repository.

    Objects created here are unreferenced until `update_ref` moves a branch
    onto them; an aborted run leaves only garbage for the server to collect.
    """

    def __init__(self, client, repo):
        owner, _, name = (repo or "").partition("/")
        if not owner or not name or "/" in name:
            raise InvalidInput(f"Repository must look like owner/name, got: {repo!r}")
        self.client = client
        self.repo = repo
        self.base = f"repos/{owner}/{name}/git"

    def _ref_path(self, branch):
        return f"refs/heads/{quote(branch, safe='/')}"

    def get_branch_tip(self, branch):
        status, data = self.client.request("GET", f"{self.base}/ref/heads/{quote(branch, safe='/')}")
        if status == 404:
            raise RemoteNotFound(f"Branch '{branch}' does not exist in {self.repo}")
        raise_for_status(status, data, f"read branch '{branch}'")
        target = (data or {}).get("object") or {}
        if target.get("type") != "commit" or not target.get("sha"):
            raise RemoteNotFound(f"Branch '{branch}' does not point at a commit")
        return target["sha"]

    def get_commit(self, sha):
        status, data = self.client.request("GET", f"{self.base}/commits/{sha}")
        raise_for_status(status, data, f"read commit {sha[:10]}")
        return Commit(
            sha=data["sha"],
            tree=data["tree"]["sha"],
            parents=[p["sha"] for p in data.get("parents") or []],
            message=data.get("message") or "",
        )

    def get_tree(self, sha):
        if sha == EMPTY_TREE_SHA:
            return []
        status, data = self.client.request("GET", f"{self.base}/trees/{sha}")
        raise_for_status(status, data, f"read tree {sha[:10]}")
        return [
            TreeEntry(name=e["path"], mode=e["mode"], type=e["type"], sha=e["sha"])
            for e in data.get("tree") or []
        ]

    def create_blob(self, content):
        payload = {"content": base64.b64encode(content).decode("ascii"), "encoding": "base64"}
        status, data = self.client.request("POST", f"{self.base}/blobs", payload)
        if status in (413, 422) and "large" in error_message(data, "").lower():
            raise ContentTooLarge(f"create blob: {error_message(data, 'content too large')}")
        raise_for_status(status, data, "create blob")
        return data["sha"]

    def create_tree(self, entries):
        if not entries:
            return EMPTY_TREE_SHA
        payload = {
            "tree": [
                {"path": e.name, "mode": e.mode, "type": e.type, "sha": e.sha}
                for e in entries
            ]
        }
        status, data = self.client.request("POST", f"{self.base}/trees", payload)
        if status == 422:
            # GitHub answers 422 when an entry refers to an object it does not have
            raise RemoteNotFound(f"create tree: {error_message(data, 'unknown object')}")
        raise_for_status(status, data, "create tree")
        return data["sha"]

    def create_commit(self, parents, tree, message, author=None):
        payload = {"message": message, "tree": tree, "parents": list(parents)}
        if author:
            payload["author"] = dict(author)
        status, data = self.client.request("POST", f"{self.base}/commits", payload)
        if status == 422:
            raise RemoteNotFound(f"create commit: {error_message(data, 'unknown parent or tree')}")
        raise_for_status(status, data, "create commit")
        return data["sha"]

    def update_ref(self, branch, expected_old, new):
        """
        Move `branch` to `new` if it still points at `expected_old`.

        The tip is re-read right before the update. Appends are sent as
        fast-forward-only updates so the server rejects them if the branch
        moved; a pseudo-amend is not a fast-forward and needs a forced update.
        """
        current = self.get_branch_tip(branch)
        if current != expected_old:
            raise Conflict(
                f"Branch '{branch}' is at {current[:10]}, expected {expected_old[:10]}",
                branch=branch,
                expected=expected_old,
                actual=current,
            )

        # Appends are guarded by the server's fast-forward check. A forced
        # pseudo-amend is only guarded by the re-read above, so a push landing
        # between that read and this PATCH is overwritten.
        fast_forward = expected_old in self.get_commit(new).parents
        payload = {"sha": new, "force": not fast_forward}
        status, data = self.client.request("PATCH", f"{self.base}/{self._ref_path(branch)}", payload)
        message = error_message(data, f"HTTP {status}")
        if status == 422 and "protected" in message.lower():
            raise Forbidden(f"update branch '{branch}': {message}")
        if status in (409, 422):
            raise Conflict(
                f"update branch '{branch}': {message}",
                branch=branch,
                expected=expected_old,
            )
        raise_for_status(status, data, f"update branch '{branch}'")


def get_object_store(repo, api_url=None, token=None):
    """Open the object store of `repo` using the configured credential."""
    from .client import get_github_client

    return GitHubObjectStore(get_github_client(token=token, api_url=api_url), repo)
