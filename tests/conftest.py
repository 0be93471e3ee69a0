import hashlib
import subprocess
from pathlib import Path

import pytest

from commit_rewrite import graph
from commit_rewrite.errors import Conflict, Forbidden, RemoteNotFound
from commit_rewrite.objects import Commit, blob_sha, write


def _hash(type_, data):
    header = f"{type_} {len(data)}\0".encode()
    return hashlib.sha1(header + data).hexdigest()


def _tree_sort_key(entry):
    return entry.name + "/" if entry.type == "tree" else entry.name


class InMemoryStore:
    """Content-addressed object store with compare-and-swap branch updates."""

    def __init__(self):
        self.objects = {}
        self.refs = {}
        self.protected = set()
        self.calls = []
        self.before_update = None
        self._clock = 0

    def _require(self, sha, type_):
        kind, _ = self.objects.get(sha, (None, None))
        if kind != type_:
            raise RemoteNotFound(f"{type_} {sha} not found")
        return self.objects[sha][1]

    def get_branch_tip(self, branch):
        self.calls.append(("get_branch_tip", branch))
        if branch not in self.refs:
            raise RemoteNotFound(f"Branch '{branch}' does not exist")
        return self.refs[branch]

    def get_commit(self, sha):
        return self._require(sha, "commit")

    def get_tree(self, sha):
        return list(self._require(sha, "tree"))

    def create_blob(self, content):
        sha = blob_sha(content)
        self.objects[sha] = ("blob", content)
        self.calls.append(("create_blob", sha))
        return sha

    def create_tree(self, entries):
        entries = sorted(entries, key=_tree_sort_key)
        for entry in entries:
            self._require(entry.sha, entry.type)
        data = b"".join(
            f"{entry.mode.lstrip('0')} {entry.name}".encode() + b"\0" + bytes.fromhex(entry.sha)
            for entry in entries
        )
        sha = _hash("tree", data)
        self.objects[sha] = ("tree", entries)
        self.calls.append(("create_tree", sha))
        return sha

    def create_commit(self, parents, tree, message, author=None):
        self._require(tree, "tree")
        for parent in parents:
            self._require(parent, "commit")
        self._clock += 1
        who = author or {"name": "bot", "email": "bot@example.com"}
        lines = [f"tree {tree}"] + [f"parent {p}" for p in parents]
        lines.append(f"author {who['name']} <{who['email']}> {self._clock} +0000")
        data = ("\n".join(lines) + "\n\n" + message).encode()
        sha = _hash("commit", data)
        self.objects[sha] = ("commit", Commit(sha, tree, list(parents), message))
        self.calls.append(("create_commit", sha))
        return sha

    def update_ref(self, branch, expected_old, new):
        if self.before_update is not None:
            hook, self.before_update = self.before_update, None
            hook(self)
        self.calls.append(("update_ref", branch, new))
        if branch not in self.refs:
            raise RemoteNotFound(f"Branch '{branch}' does not exist")
        if branch in self.protected:
            raise Forbidden(f"Branch '{branch}' is protected")
        actual = self.refs[branch]
        if actual != expected_old:
            raise Conflict(f"Branch '{branch}' moved", branch=branch, expected=expected_old, actual=actual)
        self.refs[branch] = new

    # Test helpers

    def commit_files(self, files, message="seed", parents=(), branch=None):
        """Create a commit whose tree holds exactly `files` ({path: text})."""
        tree = graph.build_tree(self, None, [write(path, text) for path, text in files.items()])
        sha = self.create_commit(list(parents), tree, message)
        if branch:
            self.refs[branch] = sha
        return sha

    def files(self, tree, prefix=""):
        """Flatten a tree into {path: text}."""
        result = {}
        for entry in self.get_tree(tree):
            path = prefix + entry.name
            if entry.type == "tree":
                result.update(self.files(entry.sha, f"{path}/"))
            else:
                result[path] = self.objects[entry.sha][1].decode()
        return result

    def tip_files(self, branch):
        return self.files(self.get_commit(self.refs[branch]).tree)

    def count(self, call):
        return sum(1 for c in self.calls if c[0] == call)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def tmp_git_repo(tmp_path):
    """Create a temporary git repository with user config set."""
    repo = tmp_path / "repo"
    repo.mkdir()

    def git(cmd):
        subprocess.check_call(f"git -C {repo} {cmd}", shell=True)

    git("init")
    git("checkout -b main")
    git('config user.email "test@example.com"')
    git('config user.name "Test User"')
    return repo, git


@pytest.fixture(autouse=True)
def clear_github_env(monkeypatch):
    """Ensure no real credential or CI branch leaks into tests."""
    for var in (
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "GITHUB_HEAD_REF",
        "GITHUB_REF_NAME",
        "GITHUB_REPOSITORY",
        "GITHUB_API_URL",
        "COMMIT_REWRITE_ID",
    ):
        monkeypatch.delenv(var, raising=False)
    return


@pytest.fixture
def write_file():
    def _write(base: Path, name: str, content: str = "sample"):
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write
